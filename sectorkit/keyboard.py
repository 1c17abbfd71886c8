"""Translation of PS/2 set-1 scancodes into characters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from sectorkit.input import InputBuffer

EXTENDED_PREFIX = 0xE0
CAPS_LOCK_CODE = 0x3A
_RELEASE_BIT = 0x80


@dataclass(frozen=True)
class Keymap:
    """A run of consecutive scancodes mapped to the characters of `chars`."""

    first_scancode: int
    chars: str


INVARIANT_KEYMAP: tuple[Keymap, ...] = (
    Keymap(0x01, "\x1b"),  # Escape
    Keymap(0x0E, "\x08"),  # Backspace
    Keymap(0x0F, "\tQWERTYUIOP"),
    Keymap(0x1C, "\r"),  # Enter
    Keymap(0x1E, "ASDFGHJKL"),
    Keymap(0x2C, "ZXCVBNM"),
    Keymap(0x37, "*"),
    Keymap(0x39, " "),  # Space
    Keymap(0x53, "\x7f"),  # Delete
)
"""Keys that produce the same character regardless of Shift (letter case aside)."""

UNSHIFTED_KEYMAP: tuple[Keymap, ...] = (
    Keymap(0x02, "1234567890-="),
    Keymap(0x1A, "[]"),
    Keymap(0x27, ";'`"),
    Keymap(0x2B, "\\"),
    Keymap(0x33, ",./"),
)

SHIFTED_KEYMAP: tuple[Keymap, ...] = (
    Keymap(0x02, "!@#$%^&*()_+"),
    Keymap(0x1A, "{}"),
    Keymap(0x27, ':"~'),
    Keymap(0x2B, "|"),
    Keymap(0x33, "<>?"),
)


def map_key(keymaps: Sequence[Keymap], scancode: int) -> int | None:
    """Return the byte that `scancode` produces in `keymaps`, or None."""
    for keymap in keymaps:
        first = keymap.first_scancode
        if first != 0 and first <= scancode < first + len(keymap.chars):
            return keymap.chars.encode("latin-1")[scancode - first]
    return None


@dataclass
class Keyboard:
    """Keyboard state: modifier keys, Caps Lock and the buffer typed bytes go to."""

    buffer: InputBuffer = field(default_factory=InputBuffer)
    l_shift: bool = False
    r_shift: bool = False
    l_ctrl: bool = False
    r_ctrl: bool = False
    l_alt: bool = False
    r_alt: bool = False
    caps_lock: bool = False

    @property
    def shift(self) -> bool:
        return self.l_shift or self.r_shift

    @property
    def ctrl(self) -> bool:
        return self.l_ctrl or self.r_ctrl

    @property
    def alt(self) -> bool:
        return self.l_alt or self.r_alt

    def handle_scancode(self, code: int) -> int | None:
        """Process one scancode; return the byte put in the buffer, if any.

        An extended scancode is passed as ``0xE0 << 8 | next_byte``.
        """
        shift = self.shift
        release = bool(code & _RELEASE_BIT)
        code &= 0x7F

        if code == CAPS_LOCK_CODE:
            if not release:
                self.caps_lock = not self.caps_lock
            return None

        c = map_key(INVARIANT_KEYMAP, code)
        if c is None:
            c = map_key(SHIFTED_KEYMAP if shift else UNSHIFTED_KEYMAP, code)

        if c is not None:
            if release:
                return None
            if shift == self.caps_lock:
                c = ord(chr(c).lower()) if 0x41 <= c <= 0x5A else c
            self.buffer.putc(c)
            return c

        pressed = not release
        if code == 0x2A:
            self.l_shift = pressed
        elif code == 0x36:
            self.r_shift = pressed
        elif code == 0x38:
            self.l_alt = pressed
        elif code == 0xE038:
            self.r_alt = pressed
        elif code == 0x1D:
            self.l_ctrl = pressed
        elif code == 0xE01D:
            self.r_ctrl = pressed
        return None