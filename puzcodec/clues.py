import collections

from .errors import InvalidDirection

ACROSS = 'across'
DOWN = 'down'
DIRECTIONS = (ACROSS, DOWN)

# clue_index: position in Puzzle.clues
# number: the global clue number printed in the grid
# cell: grid index of the first square
Clue = collections.namedtuple('Clue', ['clue_index', 'number', 'cell', 'length'])


def check_direction(direction):
    if direction not in DIRECTIONS:
        raise InvalidDirection('bad direction:{!r}'.format(direction))


class CellClues:
    """Which across and down answers a square belongs to."""
    __slots__ = ('across', 'down', 'starts_across', 'starts_down')

    def __init__(self):
        self.across = None
        self.down = None
        self.starts_across = False
        self.starts_down = False

    def __getitem__(self, direction):
        check_direction(direction)
        return self.across if direction == ACROSS else self.down

    def __repr__(self):
        return 'CellClues(across={}, down={}, starts_across={}, starts_down={})'.format(
            self.across, self.down, self.starts_across, self.starts_down)


class ClueNumbering:
    """Derives the clue map and the across and down clue lists from a grid.

    Squares are visited in row-major order. A square continues the across
    answer of a letter to its left, or starts one if it has a letter to its
    right; down answers work the same way with the squares above and below.
    A square starting either direction takes the next clue number.
    """
    def __init__(self, geometry):
        self.geometry = geometry
        self.cells = {}
        self.across = []
        self.down = []
        self.across_cells = []
        self.down_cells = []

        width = geometry.width
        is_letter = geometry.is_letter
        starts = {ACROSS: [], DOWN: []}
        clue_index = 0
        number = 0
        for i in range(geometry.cell_count):
            r, c = geometry.idx2rc(i)
            if not is_letter(r, c):
                continue
            val = CellClues()
            if is_letter(r, c - 1):
                val.across = self.cells[i - 1].across
            elif is_letter(r, c + 1):
                val.across = len(self.across_cells)
                val.starts_across = True
                self.across_cells.append([])
            if is_letter(r - 1, c):
                val.down = self.cells[i - width].down
            elif is_letter(r + 1, c):
                val.down = len(self.down_cells)
                val.starts_down = True
                self.down_cells.append([])

            if val.starts_across or val.starts_down:
                number += 1
            if val.starts_across:
                starts[ACROSS].append((clue_index, number, i))
                clue_index += 1
            if val.starts_down:
                starts[DOWN].append((clue_index, number, i))
                clue_index += 1

            if val.across is not None:
                self.across_cells[val.across].append(i)
            if val.down is not None:
                self.down_cells[val.down].append(i)
            self.cells[i] = val

        self.across = [Clue(ci, n, cell, len(cells)) for (ci, n, cell), cells
                       in zip(starts[ACROSS], self.across_cells)]
        self.down = [Clue(ci, n, cell, len(cells)) for (ci, n, cell), cells
                     in zip(starts[DOWN], self.down_cells)]

    def clue_count(self):
        return len(self.across) + len(self.down)

    def clues(self, direction):
        check_direction(direction)
        return self.across if direction == ACROSS else self.down

    def word_cells(self, index, direction):
        """Grid indices of the answer through a square, in raster order.

        A letter square with no answer in that direction is its own word.
        """
        check_direction(direction)
        word = self.cells[index][direction]
        if word is None:
            return [index]
        if direction == ACROSS:
            return list(self.across_cells[word])
        return list(self.down_cells[word])

    def clue_at(self, index, direction):
        word = self.cells[index][direction]
        if word is None:
            return None
        return self.clues(direction)[word]
