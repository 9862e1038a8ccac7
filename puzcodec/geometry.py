import collections

from .errors import OutOfBoundsCell

BLACKSQUARE = '.'


def is_blacksquare(c):
    if isinstance(c, int):
        c = chr(c)
    return c == BLACKSQUARE


class Geometry(collections.namedtuple('Geometry', ['width', 'height', 'blocks'])):
    """Immutable shape of a grid: its size and which cells are blocks.

    Extra sections keep one of these instead of a reference to the puzzle.
    The puzzle hands out a new value whenever its block layout is rebuilt.
    """
    __slots__ = ()

    @classmethod
    def from_grid(cls, grid, width, height):
        blocks = frozenset(i for i, c in enumerate(grid) if is_blacksquare(c))
        return cls(width, height, blocks)

    @property
    def cell_count(self):
        return self.width * self.height

    def in_bounds(self, row, col):
        return 0 <= row < self.height and 0 <= col < self.width

    def rc2idx(self, row, col):
        if not self.in_bounds(row, col):
            raise OutOfBoundsCell('bad row:{}, col:{}'.format(row, col))
        return row * self.width + col

    def idx2rc(self, index):
        if not 0 <= index < self.cell_count:
            raise OutOfBoundsCell('bad index:{}'.format(index))
        return divmod(index, self.width)

    def is_black(self, row, col):
        return self.rc2idx(row, col) in self.blocks

    def is_letter(self, row, col):
        return (self.in_bounds(row, col) and
                row * self.width + col not in self.blocks)
