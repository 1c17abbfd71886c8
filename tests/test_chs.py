import pytest

from sectorkit.chs import chs_to_lba, lba_to_chs

CASES = [
    ((0, 0, 1), 0),
    ((0, 0, 2), 1),
    ((0, 0, 3), 2),
    ((0, 0, 63), 62),
    ((0, 1, 1), 63),
    ((0, 15, 1), 945),
    ((0, 15, 63), 1007),
    ((1, 0, 1), 1008),
    ((1, 0, 63), 1070),
    ((1, 1, 1), 1071),
    ((1, 1, 63), 1133),
    ((1, 2, 1), 1134),
    ((1, 15, 63), 2015),
    ((2, 0, 1), 2016),
    ((15, 15, 63), 16127),
    ((16, 0, 1), 16128),
    ((31, 15, 63), 32255),
    ((32, 0, 1), 32256),
]


@pytest.mark.parametrize("chs, lba", CASES)
def test_chs_to_lba(chs, lba):
    assert chs_to_lba(*chs) == lba


@pytest.mark.parametrize("chs, lba", CASES)
def test_lba_to_chs(chs, lba):
    assert lba_to_chs(lba) == chs


@pytest.mark.parametrize("lba", [0, 1, 62, 63, 1007, 5000, 64000])
def test_round_trip(lba):
    assert chs_to_lba(*lba_to_chs(lba)) == lba


def test_sector_is_never_zero():
    assert all(1 <= lba_to_chs(lba)[2] <= 63 for lba in range(0, 2000, 7))