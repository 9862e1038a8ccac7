import puzcodec

# 7x4 sample grid; '.' is a block
#   across: 1 STUMPS, 5 PANEL, 6 TOE
#   down:   1 STP, 2 URNS, 3 PELT, 4 ATE
GRID = [
    'STUMPS.',
    'T.R.E.A',
    'PANEL.T',
    '..S.TOE',
]

# in file order: numbered clues, across before down for the same number
CLUES = [
    'Ends an innings, in one way',
    'Std. temperature and pressure',
    'Vessels for ashes',
    'Animal skin',
    'Had dinner',
    'Discussion group',
    'Foot digit',
]

KEY = 4721

# the solution letters column by column, blocks left out
COLUMN_LETTERS = 'STPTAURNSMEPELTSOATE'

LETTER_COUNT = sum(len(row) - row.count('.') for row in GRID)


def letter_cells(grid=GRID):
    return [(r, c) for r, row in enumerate(grid)
            for c, letter in enumerate(row) if letter != '.']


def fill_in(puz, grid=GRID):
    for r, c in letter_cells(grid):
        puz.set_letter_at(r, c, grid[r][c])


def build_puzzle(filled=True):
    puz = puzcodec.new_blank(len(GRID[0]), len(GRID))
    puz.title = 'Sample Puzzle'
    puz.author = 'A. Setter'
    puz.copyright = '(c) 2024 Sample Press'
    puz.notes = 'A small grid for testing.'
    for r, c in letter_cells():
        puz.set_solution_letter_at(r, c, GRID[r][c])
    puz.set_clues(CLUES)
    puz.finish_design()
    if filled:
        fill_in(puz)
    return puz


def puzzle_bytes(filled=True):
    return build_puzzle(filled=filled).tobytes()


def load_puzzle(filled=True, verify=True):
    return puzcodec.load(puzzle_bytes(filled=filled), verify=verify)


def scrambled_puzzle():
    puz = build_puzzle(filled=False)
    puz.lock_solution(KEY)
    return puzcodec.load(puz.tobytes())


def rebus_puzzle():
    """The sample grid with HEART in the top left square."""
    puz = puzcodec.new_blank(len(GRID[0]), len(GRID))
    for r, c in letter_cells():
        puz.set_solution_letter_at(r, c, GRID[r][c])
    puz.set_solution_rebus_at(0, 0, 'heart')
    puz.set_clues(CLUES)
    puz.finish_design()
    return puz
