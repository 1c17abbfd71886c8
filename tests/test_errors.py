import pytest

from sectorkit.errors import BlockError, BlockErrorKind


@pytest.mark.parametrize(
    "kind, description",
    [
        (BlockErrorKind.DEVICE_NOT_FOUND, "Block device not found"),
        (
            BlockErrorKind.SECTOR_OUT_OF_BOUNDS,
            "Sector out of bounds (greater than the block size)",
        ),
        (
            BlockErrorKind.BUFFER_INVALID,
            "Invalid buffer size (not `BLOCK_SECTOR_SIZE`)",
        ),
        (BlockErrorKind.READ_ERROR, "Error reading from the block device"),
        (BlockErrorKind.WRITE_ERROR, "Error writing to the block device"),
    ],
)
def test_description(kind, description):
    assert BlockError(kind).description == description


def test_str_is_kind_label():
    err = BlockError(BlockErrorKind.SECTOR_OUT_OF_BOUNDS)
    assert str(err) == BlockErrorKind.SECTOR_OUT_OF_BOUNDS.label


def test_messages_are_distinct():
    messages = {str(BlockError(kind)) for kind in BlockErrorKind}
    assert len(messages) == len(list(BlockErrorKind))


def test_error_keeps_its_kind():
    err = BlockError(BlockErrorKind.WRITE_ERROR)
    assert err.kind is BlockErrorKind.WRITE_ERROR
    assert err.description == "Error writing to the block device"


def test_error_is_an_exception_with_kind():
    err = BlockError(BlockErrorKind.READ_ERROR)
    assert isinstance(err, Exception)
    assert err.kind is BlockErrorKind.READ_ERROR