"""A circular buffer that collects bytes typed on an input device."""

from __future__ import annotations

from typing import Callable

BUFFER_SIZE = 256


class InputBuffer:
    """A fixed-size ring of bytes, with callbacks run on every byte received.

    Writing never blocks: once 256 bytes are pending, further writes overwrite
    the oldest ones, and a buffer that has wrapped all the way round reads as
    empty.
    """

    def __init__(self) -> None:
        self._buf = bytearray(BUFFER_SIZE)
        self._head = 0
        self._tail = 0
        self.on_receive: list[Callable[[int], None]] = []

    def is_empty(self) -> bool:
        """True if there is nothing to read."""
        return self._head == self._tail

    def putc(self, c: int) -> None:
        """Append byte `c` and notify every callback."""
        if not 0 <= c <= 0xFF:
            raise ValueError(f"not a byte: {c}")
        self._buf[self._head] = c
        self._head = (self._head + 1) % BUFFER_SIZE
        for callback in self.on_receive:
            callback(c)

    def getc(self) -> int | None:
        """Remove and return the oldest byte, or None if the buffer is empty."""
        if self.is_empty():
            return None
        c = self._buf[self._tail]
        self._tail = (self._tail + 1) % BUFFER_SIZE
        return c

    def __str__(self) -> str:
        return "".join(chr(b) for b in self._buf[self._tail : self._head])