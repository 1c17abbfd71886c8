import io

import pytest

from sectorkit.block import (
    BLOCK_SECTOR_SIZE,
    Block,
    BlockManager,
    BlockType,
    DummyDevice,
    FileBlockDriver,
    block_from_file,
)
from sectorkit.errors import BlockError, BlockErrorKind


def _file_block(sectors=4):
    return block_from_file(io.BytesIO(bytes(sectors * BLOCK_SECTOR_SIZE)))


def test_read_returns_one_sector_of_512_bytes():
    block = _file_block(2)
    assert len(block.read(0)) == 512


def test_block_type_shown_in_block_display():
    block = Block(0, "x", BlockType.FOREIGN, DummyDevice(), 1)
    assert str(block) == '    0000 | "x" (Foreign): 0001 sectors, 0000 read, 0000 write'


def test_block_from_file_size_and_type():
    block = _file_block(4)
    assert block.size == 4
    assert block.block_type is BlockType.FILE_SYSTEM
    assert block.name == "<test file>"
    assert block.index == 0


def test_write_then_read_round_trip():
    block = _file_block(3)
    data = bytes(range(256)) * 2
    block.write(2, data)
    assert block.read(2) == data
    assert block.read(1) == bytes(BLOCK_SECTOR_SIZE)


def test_counts_increment():
    block = _file_block(2)
    block.write(0, bytes(BLOCK_SECTOR_SIZE))
    block.read(0)
    block.read(1)
    assert block.read_count == 2
    assert block.write_count == 1


def test_read_out_of_bounds():
    block = _file_block(2)
    with pytest.raises(BlockError) as info:
        block.read(2)
    assert info.value.kind is BlockErrorKind.SECTOR_OUT_OF_BOUNDS
    assert block.read_count == 0


def test_write_out_of_bounds():
    block = _file_block(2)
    with pytest.raises(BlockError) as info:
        block.write(5, bytes(BLOCK_SECTOR_SIZE))
    assert info.value.kind is BlockErrorKind.SECTOR_OUT_OF_BOUNDS


def test_write_invalid_buffer():
    block = _file_block(2)
    with pytest.raises(BlockError) as info:
        block.write(0, b"short")
    assert info.value.kind is BlockErrorKind.BUFFER_INVALID
    assert block.write_count == 0


def test_write_to_foreign_block_refused():
    block = Block(0, "ext", BlockType.FOREIGN, FileBlockDriver(io.BytesIO(bytes(1024))), 2)
    with pytest.raises(PermissionError):
        block.write(0, bytes(BLOCK_SECTOR_SIZE))


def test_foreign_block_can_be_read():
    backing = io.BytesIO(b"\x07" * 1024)
    block = Block(0, "ext", BlockType.FOREIGN, FileBlockDriver(backing), 2)
    assert block.read(1) == b"\x07" * BLOCK_SECTOR_SIZE


def test_dummy_device_fails():
    block = Block(0, "dummy", BlockType.RAW, DummyDevice(), 8)
    with pytest.raises(RuntimeError, match="Reading dummy device at sector 3"):
        block.read(3)
    with pytest.raises(RuntimeError, match="Writing dummy device at sector 4"):
        block.write(4, bytes(BLOCK_SECTOR_SIZE))


def test_block_display():
    block = _file_block(4)
    block.read(0)
    assert str(block) == '    0000 | "<test file>" (File System): 0004 sectors, 0001 read, 0000 write'


def test_manager_register_and_lookup():
    manager = BlockManager()
    first = manager.register_block(BlockType.RAW, "hda", 10, DummyDevice())
    second = manager.register_block(BlockType.SWAP, "hda-1", 5, DummyDevice())
    assert (first, second) == (0, 1)
    assert manager.by_id(1).name == "hda-1"
    assert manager.by_id(1).index == 1
    assert manager.by_name("hda").size == 10
    assert manager.by_id(2) is None
    assert manager.by_id(-1) is None
    assert manager.by_name("missing") is None
    assert len(manager) == 2


def test_manager_by_name_returns_first():
    manager = BlockManager()
    manager.register_block(BlockType.RAW, "dup", 1, DummyDevice())
    manager.register_block(BlockType.SWAP, "dup", 2, DummyDevice())
    assert manager.by_name("dup").index == 0


def test_manager_display_lists_every_block():
    manager = BlockManager()
    manager.register_block(BlockType.RAW, "hda", 10, DummyDevice())
    manager.register_block(BlockType.KERNEL, "hda-1", 5, DummyDevice())
    lines = str(manager).splitlines()
    assert lines[0] == "Block Devices:"
    assert lines[1:] == [str(block) for block in manager]