import pytest

from puzcodec import scramble
from puzcodec.errors import InvalidKey, ScrambleError


def test_scramble_string_known_vector():
    assert scramble.scramble_string('ABCDE', 1234) == 'PMNEK'


def test_unscramble_string_known_vector():
    assert scramble.unscramble_string('PMNEK', 1234) == 'ABCDE'


@pytest.mark.parametrize('s', ['A', 'AB', 'CATAR', 'THEQUICKBROWNFOXJUMPS'])
def test_unscramble_reverses_scramble(s):
    for key in (1000, 4721, 9999):
        assert scramble.unscramble_string(scramble.scramble_string(s, key), key) == s


def test_shift_wraps_past_z():
    assert scramble.shift('XYZ', [4, 4, 4, 4]) == 'BCD'
    assert scramble.unshift('BCD', [4, 4, 4, 4]) == 'XYZ'


def test_rotate():
    assert scramble.rotate('ABCDE', 2) == 'CDEAB'
    assert scramble.rotate('ABCDE', -2) == 'DEABC'
    assert scramble.rotate('ABC', 4) == 'BCA'
    assert scramble.rotate('', 3) == ''


def test_shuffle_starts_with_second_half():
    assert scramble.shuffle('ABCD') == 'CADB'
    assert scramble.shuffle('ABCDE') == 'CADBE'
    assert scramble.unshuffle('CADBE') == 'ABCDE'


def test_square_reads_columns():
    assert scramble.square('CATXXAXXR', 3, 3) == 'CXXAXXTAR'


def test_restore():
    assert scramble.restore('ABC.DEF', 'XYZABC') == 'XYZ.ABC'


def test_scramble_solution_keeps_blocks():
    solution = 'CAT..A..R'
    scrambled = scramble.scramble_solution(solution, 3, 3, 1234)
    assert [i for i, c in enumerate(scrambled) if c == '.'] == [3, 4, 6, 7]
    assert scramble.unscramble_solution(scrambled, 3, 3, 1234) == solution


@pytest.mark.parametrize('key', [123, 12345, 'abcd', '0123'])
def test_bad_key(key):
    with pytest.raises(InvalidKey):
        scramble.scramble_string('ABC', key)


def test_only_letters_scramble():
    with pytest.raises(ScrambleError):
        scramble.scramble_string('AB1', 1234)
