import math
import sys
import textwrap

from .clues import ACROSS, DOWN


def grid_lines(puzzle, style=None):
    """Render the grid one text row per puzzle row.

    style is None for the current fill, 'solution' for the answers or
    'blank' for an empty grid. Blocks show as '#', empty squares as '-'.
    """
    source = puzzle.solution if style == 'solution' else puzzle.fill
    lines = []
    for r in range(puzzle.height):
        cells = []
        for c in range(puzzle.width):
            if puzzle.is_black(r, c):
                cells.append('#')
            elif style == 'blank':
                cells.append('-')
            else:
                cells.append(source[puzzle.rc2idx(r, c)])
        lines.append(' '.join(cells))
    return lines


def markup_lines(puzzle):
    """Render GEXT flags as one hex byte per square."""
    gext = puzzle.gext
    return [' '.join('{:02x}'.format(gext.mask(r, c))
                     for c in range(puzzle.width))
            for r in range(puzzle.height)]


def clue_lines(puzzle, downs_only=False):
    clues = {d: [(entry.number, puzzle.clue_text(entry).strip())
                 for entry in puzzle.require_numbering().clues(d)]
             for d in (ACROSS, DOWN)}

    # Find the width in characters of the longest clue number
    max_num_width = max([len(str(num)) for d in clues for num, _ in clues[d]]
                        or [1])

    lines = []
    for direction in (ACROSS, DOWN):
        if downs_only and direction == ACROSS:
            continue
        lines.extend([direction.upper(), ''])
        for num, clue in clues[direction]:
            lines.append(f"{num:>{max_num_width}}. {clue}")
        lines.append('')

    return lines, max_num_width


def printer_output(puzzle, style=None, width=None, downs_only=False,
                   out=None):
    out = out or sys.stdout
    print_width = width or 92

    lines, max_num_width = clue_lines(puzzle, downs_only=downs_only)
    grid = grid_lines(puzzle, style=style)

    print(f'{puzzle.title} - {puzzle.author}', file=out)
    print(file=out)
    print('\n'.join(grid), file=out)
    print(file=out)

    wrapped_clue_lines = []
    num_cols = 2 if print_width > 64 else 1
    column_width = print_width // num_cols - 2

    for l in lines:
        if l == '':
            wrapped_clue_lines.append('')
            continue

        # Wrap the text
        wrapped_clue_lines.extend(textwrap.wrap(
            l, width=column_width,
            subsequent_indent=" " * (max_num_width + 2)))

    num_wrapped_rows = math.ceil(len(wrapped_clue_lines) / num_cols)

    for r in range(num_wrapped_rows):
        clue_parts = [wrapped_clue_lines[i] for i in
                      range(r, len(wrapped_clue_lines), num_wrapped_rows)]
        current_row = '  '.join([f'{{:{column_width}}}'] * len(clue_parts))
        print(current_row.format(*clue_parts).rstrip(), file=out)
