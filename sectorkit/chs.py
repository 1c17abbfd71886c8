"""Conversions between CHS and LBA disk addresses."""

_HEADS = 16
_SECTORS_PER_TRACK = 63


def chs_to_lba(cylinder: int, head: int, sector: int) -> int:
    """Convert a cylinder/head/sector address to a logical block address."""
    lba = (cylinder * _HEADS + head) * _SECTORS_PER_TRACK + sector - 1
    return lba & 0xFFFF_FFFF


def lba_to_chs(lba: int) -> tuple[int, int, int]:
    """Convert a logical block address to a (cylinder, head, sector) tuple."""
    track, sector_index = divmod(lba, _SECTORS_PER_TRACK)
    cylinder, head = divmod(track, _HEADS)
    return cylinder & 0xFF, head & 0xFF, (sector_index + 1) & 0xFF