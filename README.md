# sectorkit

A library for sector-addressed storage and low-level keyboard input.

## What is in it

- **Block devices** (`sectorkit.block`): a `Block` wraps a driver that
  implements `BlockOp` (`read(sector)` returning bytes and
  `write(sector, data)`). `Block.read` and `Block.write` raise `BlockError`
  when the sector is outside the device or a sector's data is not
  `BLOCK_SECTOR_SIZE` (512) bytes, and keep read and write counts. Writing to
  a device of type `BlockType.FOREIGN` raises `PermissionError`.
  `BlockManager` registers devices with `register_block` and finds them with
  `by_id` or `by_name`; printing it lists every device. `FileBlockDriver`
  serves sectors from a seekable binary file, and `block_from_file` wraps such
  a file in a file-system `Block`. `DummyDevice` is a driver that raises
  `RuntimeError` on every access.
- **Errors** (`sectorkit.errors`): `BlockError` carries a `kind`, a
  `BlockErrorKind` member (`DEVICE_NOT_FOUND`, `SECTOR_OUT_OF_BOUNDS`,
  `BUFFER_INVALID`, `READ_ERROR`, `WRITE_ERROR`), and a `description`.
- **CHS addressing** (`sectorkit.chs`): `chs_to_lba` and `lba_to_chs` convert
  between cylinder/head/sector and logical block addresses, with 16 heads and
  63 sectors per track.
- **MBR partitions** (`sectorkit.partition`): `PartitionTable` and
  `PartitionTableEntry` parse (`from_bytes`) and serialise (`to_bytes`) the
  512-byte master boot record. `partition_scan(manager, block)` follows
  primary and extended partition tables, registers each valid partition with
  the manager as a device of its own (named `<device>-<n>`, backed by a
  `Partition` driver) and returns how many partitions it saw.
  `register_partition` writes a new Linux swap entry into a device's table;
  other partition types raise `ValueError`. `partition_type_name` gives the
  usual name of a partition type byte. Problems met while scanning are
  reported through the `logging` module, not raised.
- **Input** (`sectorkit.input`, `sectorkit.keyboard`): `InputBuffer` is a
  256-byte ring buffer with `putc`, `getc` and `is_empty`, which calls every
  function in its `on_receive` list for each byte put in. `Keyboard` turns
  PS/2 scancode set 1 codes into ASCII bytes with `handle_scancode`, tracking
  Shift, Ctrl, Alt and Caps Lock, and puts typed bytes into its buffer.
  `map_key` looks a scancode up in a sequence of `Keymap` runs.

## What it does not do

There is no hardware access: no disk controller driver and no reading of
keyboard ports. Storage is whatever `BlockOp` driver you supply, such as a
file through `FileBlockDriver`, and scancodes must be passed to
`Keyboard.handle_scancode` by the caller. There is no command-line tool.

## Installing

```
pip install .
```

## Examples

Scanning a disk image for partitions:

```python
import io

from sectorkit.block import BLOCK_SECTOR_SIZE, BlockManager, BlockType, FileBlockDriver
from sectorkit.partition import PartitionTable, partition_scan

image = io.BytesIO(bytes(BLOCK_SECTOR_SIZE * 2048))

table = PartitionTable()
entry = table.entries[0]
entry.partition_type = 0x83
entry.set_start(63)
entry.set_size(1000)
image.write(table.to_bytes())

manager = BlockManager()
disk_index = manager.register_block(BlockType.RAW, "hda", 2048, FileBlockDriver(image))
partition_scan(manager, manager.by_id(disk_index))
print(manager)  # lists "hda" and the partition "hda-1"
```

Decoding keystrokes:

```python
from sectorkit.input import InputBuffer
from sectorkit.keyboard import Keyboard

buffer = InputBuffer()
keyboard = Keyboard(buffer)
for code in (0x23, 0xA3, 0x17, 0x97):  # press and release "h", then "i"
    keyboard.handle_scancode(code)
print(str(buffer))  # "hi"
```

## Running the tests

```
pip install .[test]
pytest
```