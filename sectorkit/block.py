"""Block devices, their drivers and a registry of devices."""

from __future__ import annotations

import abc
import enum
import io
import logging
import threading
from typing import BinaryIO, Iterator

from sectorkit.errors import BlockError, BlockErrorKind

logger = logging.getLogger(__name__)

BLOCK_SECTOR_SIZE = 512
"""Size of a block device sector in bytes."""

_MAX_SECTORS = 0xFFFF_FFFF


class BlockType(enum.Enum):
    """What a block device holds."""

    KERNEL = "Kernel"
    FILE_SYSTEM = "File System"
    SCRATCH = "Scratch"
    SWAP = "Swap"
    RAW = "Raw"
    FOREIGN = "Foreign"

    def __str__(self) -> str:
        return self.value


class BlockOp(abc.ABC):
    """Low-level interface implemented by block device drivers."""

    @abc.abstractmethod
    def read(self, sector: int) -> bytes:
        """Return the contents of `sector`."""

    @abc.abstractmethod
    def write(self, sector: int, data: bytes) -> None:
        """Store `data` in `sector`."""


class Block:
    """A block device with a fixed number of sectors."""

    def __init__(
        self,
        index: int,
        name: str,
        block_type: BlockType,
        driver: BlockOp,
        size: int,
    ) -> None:
        self._index = index
        self._name = name
        self._block_type = block_type
        self._driver = driver
        self._size = size
        self._lock = threading.Lock()
        self._count_lock = threading.Lock()
        self._read_count = 0
        self._write_count = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def name(self) -> str:
        return self._name

    @property
    def block_type(self) -> BlockType:
        return self._block_type

    @property
    def size(self) -> int:
        """The size of the device in sectors."""
        return self._size

    @property
    def read_count(self) -> int:
        return self._read_count

    @property
    def write_count(self) -> int:
        return self._write_count

    def _check_sector(self, sector: int) -> None:
        if not 0 <= sector < self._size:
            raise BlockError(BlockErrorKind.SECTOR_OUT_OF_BOUNDS)

    def read(self, sector: int) -> bytes:
        """Read one sector from the device."""
        self._check_sector(sector)
        with self._count_lock:
            self._read_count += 1
        with self._lock:
            data = bytes(self._driver.read(sector))
        if len(data) != BLOCK_SECTOR_SIZE:
            raise BlockError(BlockErrorKind.BUFFER_INVALID)
        return data

    def write(self, sector: int, data: bytes) -> None:
        """Write one sector to the device."""
        self._check_sector(sector)
        if len(data) != BLOCK_SECTOR_SIZE:
            raise BlockError(BlockErrorKind.BUFFER_INVALID)
        if self._block_type is BlockType.FOREIGN:
            raise PermissionError("Cannot write to foreign block")
        with self._count_lock:
            self._write_count += 1
        with self._lock:
            self._driver.write(sector, bytes(data))

    def __str__(self) -> str:
        return (
            f'    {self._index:04} | "{self._name}" ({self._block_type}): '
            f"{self._size:04} sectors, {self._read_count:04} read, "
            f"{self._write_count:04} write"
        )


class BlockManager:
    """Registry of all block devices."""

    def __init__(self) -> None:
        self._blocks: list[Block] = []

    def register_block(
        self, block_type: BlockType, name: str, size: int, driver: BlockOp
    ) -> int:
        """Register a device and return its index."""
        index = len(self._blocks)
        self._blocks.append(Block(index, name, block_type, driver, size))
        logger.info(
            'Registered block device "%s" (%s type) with %d sectors',
            name,
            block_type,
            size,
        )
        return index

    def by_id(self, index: int) -> Block | None:
        """Return the device with the given index, or None."""
        if 0 <= index < len(self._blocks):
            return self._blocks[index]
        return None

    def by_name(self, name: str) -> Block | None:
        """Return the first device with the given name, or None."""
        return next((b for b in self._blocks if b.name == name), None)

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(list(self._blocks))

    def __str__(self) -> str:
        return "Block Devices:\n" + "".join(f"{block}\n" for block in self._blocks)


class DummyDevice(BlockOp):
    """A driver that fails on every access."""

    def read(self, sector: int) -> bytes:
        raise RuntimeError(f"Reading dummy device at sector {sector}")

    def write(self, sector: int, data: bytes) -> None:
        raise RuntimeError(f"Writing dummy device at sector {sector}")


class FileBlockDriver(BlockOp):
    """A driver backed by a seekable binary file."""

    def __init__(self, file: BinaryIO) -> None:
        self._file = file

    def read(self, sector: int) -> bytes:
        self._file.seek(sector * BLOCK_SECTOR_SIZE)
        data = self._file.read(BLOCK_SECTOR_SIZE)
        if len(data) != BLOCK_SECTOR_SIZE:
            raise EOFError(f"short read at sector {sector}")
        return data

    def write(self, sector: int, data: bytes) -> None:
        self._file.seek(sector * BLOCK_SECTOR_SIZE)
        self._file.write(data)


def block_from_file(file: BinaryIO) -> Block:
    """Create a file-system block device backed by `file`."""
    size = file.seek(0, io.SEEK_END)
    sectors = size // BLOCK_SECTOR_SIZE
    if sectors > _MAX_SECTORS:
        raise ValueError("file too large")
    return Block(0, "<test file>", BlockType.FILE_SYSTEM, FileBlockDriver(file), sectors)