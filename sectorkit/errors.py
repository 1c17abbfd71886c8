"""Errors raised by block device operations."""

from __future__ import annotations

import enum


class BlockErrorKind(enum.Enum):
    """The ways a block operation can fail."""

    DEVICE_NOT_FOUND = ("DeviceNotFound", "Block device not found")
    SECTOR_OUT_OF_BOUNDS = (
        "SectorOutOfBounds",
        "Sector out of bounds (greater than the block size)",
    )
    BUFFER_INVALID = (
        "BufferInvalid",
        "Invalid buffer size (not `BLOCK_SECTOR_SIZE`)",
    )
    READ_ERROR = ("ReadError", "Error reading from the block device")
    WRITE_ERROR = ("WriteError", "Error writing to the block device")

    def __init__(self, label: str, description: str) -> None:
        self.label = label
        self.description = description

    def __str__(self) -> str:
        return self.label


class BlockError(Exception):
    """A failed block device operation."""

    def __init__(self, kind: BlockErrorKind) -> None:
        super().__init__(kind.label)
        self.kind = kind

    @property
    def description(self) -> str:
        """A human-readable explanation of the failure."""
        return self.kind.description

    def __str__(self) -> str:
        return self.kind.label

    def __repr__(self) -> str:
        return f"BlockError({self.kind.label})"