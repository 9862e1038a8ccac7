import io

from puzcodec import GEXT, printer

import helper


def test_grid_lines():
    p = helper.load_puzzle()
    lines = printer.grid_lines(p)
    assert lines[0] == 'S T U M P S #'
    assert lines[3] == '# # S # T O E'


def test_grid_lines_styles():
    p = helper.load_puzzle(filled=False)
    assert printer.grid_lines(p)[1] == '- # - # - # -'
    assert printer.grid_lines(p, style='solution')[1] == 'T # R # E # A'
    assert printer.grid_lines(helper.load_puzzle(), style='blank')[2] == '- - - - - # -'


def test_markup_lines():
    p = helper.load_puzzle()
    p.gext.set_mask(0, 1, GEXT.CIRCLED)
    assert printer.markup_lines(p)[0] == '00 80 00 00 00 00 00'


def test_clue_lines():
    p = helper.load_puzzle()
    lines, num_width = printer.clue_lines(p)
    assert num_width == 1
    assert lines[:3] == ['ACROSS', '', '1. Ends an innings, in one way']
    assert '5. Discussion group' in lines
    assert '4. Had dinner' in lines
    assert lines.index('DOWN') > lines.index('6. Foot digit')


def test_clue_lines_downs_only():
    lines, _ = printer.clue_lines(helper.load_puzzle(), downs_only=True)
    assert 'ACROSS' not in lines
    assert lines[0] == 'DOWN'


def test_printer_output():
    out = io.StringIO()
    printer.printer_output(helper.load_puzzle(), width=60, out=out)
    text = out.getvalue()
    assert text.startswith('Sample Puzzle - A. Setter\n')
    assert 'S T U M P S #' in text
    assert '3. Animal skin' in text
