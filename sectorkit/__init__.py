"""Block devices, MBR partition tables, CHS addressing and PS/2 keyboard input."""

__version__ = "0.1.0"
__all__ = ["block", "chs", "errors", "input", "keyboard", "partition"]