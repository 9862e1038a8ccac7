import pytest

from puzcodec.clues import ACROSS, DOWN, ClueNumbering, check_direction
from puzcodec.errors import InvalidDirection
from puzcodec.geometry import Geometry


def numbering(rows):
    return ClueNumbering(Geometry.from_grid(''.join(rows), len(rows[0]), len(rows)))


def test_open_grid():
    n = numbering(['ABC', 'DEF', 'GHI'])
    assert [(c.number, c.clue_index) for c in n.across] == [(1, 0), (4, 4), (5, 5)]
    assert [(c.number, c.clue_index) for c in n.down] == [(1, 1), (2, 2), (3, 3)]
    assert all(c.length == 3 for c in n.across + n.down)
    assert n.clue_count() == 6


def test_shared_number_for_both_directions():
    n = numbering(['AB', 'C.'])
    assert n.across[0].number == 1
    assert n.down[0].number == 1
    assert n.cells[0].starts_across
    assert n.cells[0].starts_down


def test_single_squares_start_nothing():
    n = numbering(['A.B', '...', 'C.D'])
    assert n.clue_count() == 0
    assert sorted(n.cells) == [0, 2, 6, 8]
    assert n.cells[0].across is None
    assert n.cells[0].down is None


def test_squares_inherit_from_neighbours():
    n = numbering(['ABC', '.D.', '.E.'])
    assert n.cells[2].across == 0
    assert not n.cells[2].starts_across
    assert n.cells[7].down == n.cells[1].down
    assert n.word_cells(7, DOWN) == [1, 4, 7]
    assert n.word_cells(4, ACROSS) == [4]


def test_clue_at():
    n = numbering(['ABC', '.D.', '.E.'])
    assert n.clue_at(4, DOWN) == n.down[0]
    assert n.clue_at(4, ACROSS) is None


def test_blocks_have_no_entry():
    n = numbering(['AB.', 'CDE'])
    assert 2 not in n.cells
    assert set(n.cells) == {0, 1, 3, 4, 5}


def test_check_direction():
    check_direction(ACROSS)
    check_direction(DOWN)
    with pytest.raises(InvalidDirection):
        check_direction('up')


def test_cell_clues_lookup_by_direction():
    n = numbering(['AB', 'CD'])
    assert n.cells[3][ACROSS] == 1
    assert n.cells[3][DOWN] == 1
    with pytest.raises(InvalidDirection):
        n.cells[3]['diagonal']
