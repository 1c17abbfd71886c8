"""MBR partition tables: parsing, scanning and registering partitions."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field

from sectorkit.block import BLOCK_SECTOR_SIZE, Block, BlockManager, BlockOp, BlockType
from sectorkit.chs import lba_to_chs
from sectorkit.errors import BlockError, BlockErrorKind

logger = logging.getLogger(__name__)

MBR_SIGNATURE = 0xAA55
"""The "valid bootsector" signature stored in the last two bytes of an MBR."""

BOOTSTRAP_SIZE = 440
ENTRY_SIZE = 16
ENTRY_COUNT = 4
_ENTRIES_OFFSET = 446

EXTENDED_PARTITION_TYPES = frozenset({0x05, 0x0F, 0x85, 0xC5})
LINUX_SWAP_TYPE = 0x82

_ENTRY_FORMAT = struct.Struct("<8BII")
_HEADER_FORMAT = struct.Struct("<IH")
_SIGNATURE_FORMAT = struct.Struct("<H")

_PARTITION_TYPE_NAMES = {
    0x00: "Empty",
    0x01: "FAT12",
    0x02: "XENIX root",
    0x03: "XENIX usr",
    0x04: "FAT16 <32M",
    0x05: "Extended",
    0x06: "FAT16",
    0x07: "HPFS/NTFS",
    0x08: "AIX",
    0x09: "AIX bootable",
    0x0A: "OS/2 Boot Manager",
    0x0B: "W95 FAT32",
    0x0C: "W95 FAT32 (LBA)",
    0x0E: "W95 FAT16 (LBA)",
    0x0F: "W95 Ext'd (LBA)",
    0x10: "OPUS",
    0x11: "Hidden FAT12",
    0x12: "Compaq diagnostics",
    0x14: "Hidden FAT16 <32M",
    0x16: "Hidden FAT16",
    0x17: "Hidden HPFS/NTFS",
    0x18: "AST SmartSleep",
    0x1B: "Hidden W95 FAT32",
    0x1C: "Hidden W95 FAT32 (LBA)",
    0x1E: "Hidden W95 FAT16 (LBA)",
    0x20: "Pintos OS kernel",
    0x21: "Pintos file system",
    0x22: "Pintos scratch",
    0x23: "Pintos swap",
    0x24: "NEC DOS",
    0x39: "Plan 9",
    0x3C: "PartitionMagic recovery",
    0x40: "Venix 80286",
    0x41: "PPC PReP Boot",
    0x42: "SFS",
    0x4D: "QNX4.x",
    0x4E: "QNX4.x 2nd part",
    0x4F: "QNX4.x 3rd part",
    0x50: "OnTrack DM",
    0x51: "OnTrack DM6 Aux1",
    0x52: "CP/M",
    0x53: "OnTrack DM6 Aux3",
    0x54: "OnTrackDM6",
    0x55: "EZ-Drive",
    0x56: "Golden Bow",
    0x5C: "Priam Edisk",
    0x61: "SpeedStor",
    0x63: "GNU HURD or SysV",
    0x64: "Novell Netware 286",
    0x65: "Novell Netware 386",
    0x70: "DiskSecure Multi-Boot",
    0x75: "PC/IX",
    0x80: "Old Minix",
    0x81: "Minix / old Linux",
    0x82: "Linux swap / Solaris",
    0x83: "Linux",
    0x84: "OS/2 hidden C: drive",
    0x85: "Linux extended",
    0x86: "NTFS volume set",
    0x87: "NTFS volume set",
    0x88: "Linux plaintext",
    0x8E: "Linux LVM",
    0x93: "Amoeba",
    0x94: "Amoeba BBT",
    0x9F: "BSD/OS",
    0xA0: "IBM Thinkpad hibernation",
    0xA5: "FreeBSD",
    0xA6: "OpenBSD",
    0xA7: "NeXTSTEP",
    0xA8: "Darwin UFS",
    0xA9: "NetBSD",
    0xAB: "Darwin boot",
    0xB7: "BSDI fs",
    0xB8: "BSDI swap",
    0xBB: "Boot Wizard hidden",
    0xBE: "Solaris boot",
    0xBF: "Solaris",
    0xC1: "DRDOS/sec (FAT-12)",
    0xC4: "DRDOS/sec (FAT-16 < 32M)",
    0xC6: "DRDOS/sec (FAT-16)",
    0xC7: "Syrinx",
    0xDA: "Non-FS data",
    0xDB: "CP/M / CTOS / ...",
    0xDE: "Dell Utility",
    0xDF: "BootIt",
    0xE1: "DOS access",
    0xE3: "DOS R/O",
    0xE4: "SpeedStor",
    0xEB: "BeOS fs",
    0xEE: "EFI GPT",
    0xEF: "EFI (FAT-12/16/32)",
    0xF0: "Linux/PA-RISC boot",
    0xF1: "SpeedStor",
    0xF4: "SpeedStor",
    0xF2: "DOS secondary",
    0xFD: "Linux raid autodetect",
    0xFE: "LANstep",
    0xFF: "BBT",
}

_BLOCK_TYPES_BY_PARTITION_TYPE = {
    0x20: BlockType.KERNEL,
    0x21: BlockType.FILE_SYSTEM,
    0x22: BlockType.SCRATCH,
    0x23: BlockType.SWAP,
}


def partition_type_name(partition_type: int) -> str:
    """Return the conventional name of an MBR partition type byte."""
    return _PARTITION_TYPE_NAMES.get(partition_type, "Unknown")


@dataclass
class PartitionTableEntry:
    """One 16-byte entry of an MBR partition table."""

    bootable: int = 0
    start_cylinder: int = 0
    start_head: int = 0
    start_sector: int = 0
    partition_type: int = 0
    end_cylinder: int = 0
    end_head: int = 0
    end_sector: int = 0
    offset: int = 0
    size: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> PartitionTableEntry:
        """Parse an entry from the first 16 bytes of `data`."""
        if len(data) < ENTRY_SIZE:
            raise ValueError(f"partition entry needs {ENTRY_SIZE} bytes, got {len(data)}")
        return cls(*_ENTRY_FORMAT.unpack_from(data))

    def to_bytes(self) -> bytes:
        """Serialize the entry into its 16-byte on-disk form."""
        return _ENTRY_FORMAT.pack(
            self.bootable,
            self.start_cylinder,
            self.start_head,
            self.start_sector,
            self.partition_type,
            self.end_cylinder,
            self.end_head,
            self.end_sector,
            self.offset,
            self.size,
        )

    def is_empty(self) -> bool:
        """True if the entry describes no partition."""
        return self.size == 0 or self.partition_type == 0

    def set_bootable(self, bootable: bool) -> None:
        self.bootable = 0x01 if bootable else 0x00

    def set_start(self, start: int) -> None:
        """Set the start CHS address and the offset from an LBA."""
        self.start_cylinder, self.start_head, self.start_sector = lba_to_chs(start)
        self.offset = start

    def set_end(self, end: int) -> None:
        """Set the end CHS address and the size from an LBA; the offset must be set first."""
        if end < self.offset:
            raise ValueError(f"end {end} lies before offset {self.offset}")
        self.end_cylinder, self.end_head, self.end_sector = lba_to_chs(end)
        self.size = end - self.offset

    def set_offset(self, offset: int) -> None:
        """Set the offset and the start CHS address."""
        self.set_start(offset)

    def set_size(self, size: int) -> None:
        """Set the size and the end CHS address; the offset must be set first."""
        self.set_end(self.offset + size)

    def __str__(self) -> str:
        return (
            f"bootable: {self.bootable}, "
            f"start: {self.start_cylinder}:{self.start_head}:{self.start_sector}, "
            f"type: {partition_type_name(self.partition_type)}, "
            f"end: {self.end_cylinder}:{self.end_head}:{self.end_sector}, "
            f"offset: {self.offset}, size: {self.size}"
        )


def _empty_entries() -> list[PartitionTableEntry]:
    return [PartitionTableEntry() for _ in range(ENTRY_COUNT)]


@dataclass
class PartitionTable:
    """A master boot record with its four partition entries."""

    bootstrap: bytes = bytes(BOOTSTRAP_SIZE)
    id: int = 0
    reserved: int = 0
    entries: list[PartitionTableEntry] = field(default_factory=_empty_entries)
    signature: int = MBR_SIGNATURE

    @classmethod
    def from_bytes(cls, data: bytes) -> PartitionTable:
        """Parse a table from a 512-byte sector."""
        if len(data) < BLOCK_SECTOR_SIZE:
            raise ValueError(
                f"partition table needs {BLOCK_SECTOR_SIZE} bytes, got {len(data)}"
            )
        disk_id, reserved = _HEADER_FORMAT.unpack_from(data, BOOTSTRAP_SIZE)
        entries = [
            PartitionTableEntry.from_bytes(data[start : start + ENTRY_SIZE])
            for start in range(
                _ENTRIES_OFFSET, _ENTRIES_OFFSET + ENTRY_COUNT * ENTRY_SIZE, ENTRY_SIZE
            )
        ]
        (signature,) = _SIGNATURE_FORMAT.unpack_from(data, BLOCK_SECTOR_SIZE - 2)
        return cls(bytes(data[:BOOTSTRAP_SIZE]), disk_id, reserved, entries, signature)

    def to_bytes(self) -> bytes:
        """Serialize the table into a 512-byte sector."""
        if len(self.bootstrap) != BOOTSTRAP_SIZE:
            raise ValueError(f"bootstrap must be {BOOTSTRAP_SIZE} bytes")
        if len(self.entries) != ENTRY_COUNT:
            raise ValueError(f"a partition table holds exactly {ENTRY_COUNT} entries")
        return b"".join(
            [
                bytes(self.bootstrap),
                _HEADER_FORMAT.pack(self.id, self.reserved),
                *(entry.to_bytes() for entry in self.entries),
                _SIGNATURE_FORMAT.pack(self.signature),
            ]
        )


class Partition(BlockOp):
    """A driver that maps sectors onto a region of another registered device."""

    def __init__(self, manager: BlockManager, block_index: int, start: int) -> None:
        self.manager = manager
        self.block_index = block_index
        self.start = start

    def _device(self) -> Block:
        device = self.manager.by_id(self.block_index)
        if device is None:
            raise BlockError(BlockErrorKind.DEVICE_NOT_FOUND)
        return device

    def read(self, sector: int) -> bytes:
        return self._device().read(sector + self.start)

    def write(self, sector: int, data: bytes) -> None:
        self._device().write(sector + self.start, data)


def partition_scan(manager: BlockManager, block: Block) -> int:
    """Register every partition found on `block`; return how many were seen."""
    found = _read_partition_table(manager, block, 0, 0, 0)
    if found == 0:
        logger.error("%s: Device contains no partitions", block.name)
    return found


def _read_partition_table(
    manager: BlockManager,
    block: Block,
    sector: int,
    primary_extended_sector: int,
    part_nr: int,
) -> int:
    if sector >= block.size:
        logger.error(
            "%s: Partition table at sector %d past end of device (%d sectors)",
            block.name,
            sector,
            block.size,
        )
        return part_nr

    try:
        table = PartitionTable.from_bytes(block.read(sector))
    except BlockError:
        logger.error("%s: Error reading partition table", block.name)
        return part_nr

    if table.signature != MBR_SIGNATURE:
        if primary_extended_sector == 0:
            logger.error("%s: Invalid partition table signature", block.name)
        else:
            logger.error("%s: Invalid extended partition table in sector", block.name)
        return part_nr

    for entry in table.entries:
        if entry.is_empty():
            continue
        if entry.partition_type in EXTENDED_PARTITION_TYPES:
            logger.error("%s: Extended partition in sector %d", block.name, sector)
            if sector == 0:
                part_nr = _read_partition_table(
                    manager, block, entry.offset, entry.offset, part_nr
                )
            else:
                part_nr = _read_partition_table(
                    manager,
                    block,
                    entry.offset + primary_extended_sector,
                    primary_extended_sector,
                    part_nr,
                )
        else:
            part_nr += 1
            _found_partition(
                manager,
                block,
                entry.partition_type,
                entry.offset + sector,
                entry.size,
                part_nr,
            )
    return part_nr


def _found_partition(
    manager: BlockManager,
    block: Block,
    partition_type: int,
    start: int,
    size: int,
    part_nr: int,
) -> None:
    if start >= block.size:
        logger.error(
            "%s: Partition %d starts at sector %d past end of device (%d sectors)",
            block.name,
            part_nr,
            start,
            block.size,
        )
        return
    if start + size > block.size:
        logger.error(
            "%s: Partition %d ends at sector %d past end of device (%d sectors)",
            block.name,
            part_nr,
            start + size,
            block.size,
        )
        return

    block_type = _BLOCK_TYPES_BY_PARTITION_TYPE.get(partition_type, BlockType.RAW)
    logger.info(
        "%s: Found partition %d (%s), %d to %d, %d sectors",
        block.name,
        part_nr,
        partition_type_name(partition_type),
        start,
        start + size,
        size,
    )
    manager.register_block(
        block_type,
        f"{block.name}-{part_nr}",
        size,
        Partition(manager, block.index, start),
    )


def register_partition(
    manager: BlockManager,
    start: int,
    size: int,
    block_type: BlockType,
    device: int,
) -> None:
    """Record a new partition in the partition table of device `device`.

    Overlaps with existing partitions are not checked.
    """
    block = manager.by_id(device)
    if block is None:
        raise BlockError(BlockErrorKind.DEVICE_NOT_FOUND)
    if start + size > block.size:
        raise BlockError(BlockErrorKind.SECTOR_OUT_OF_BOUNDS)
    if block_type is not BlockType.SWAP:
        raise ValueError(f"Registering partition of type {block_type} not supported")
    _register_swap_partition(start, size, block)


def _register_swap_partition(start: int, size: int, device: Block) -> None:
    table = PartitionTable.from_bytes(device.read(0))
    entry = next((e for e in table.entries if e.is_empty()), None)
    if entry is None:
        logger.error("No empty partition entries found")
        raise BlockError(BlockErrorKind.WRITE_ERROR)

    entry.set_bootable(False)
    entry.set_start(start)
    entry.partition_type = LINUX_SWAP_TYPE
    entry.set_size(size)
    device.write(0, table.to_bytes())