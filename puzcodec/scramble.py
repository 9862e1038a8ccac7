"""Scrambling ("locking") of a puzzle solution with a four-digit key."""

import functools
import operator
import string

from .checksum import data_cksum
from .errors import InvalidKey, ScrambleError
from .geometry import BLACKSQUARE, is_blacksquare

ATOZ = string.ascii_uppercase

ENCODING = 'ISO-8859-1'


def scramble_solution(solution, width, height, key, ignore_chars=BLACKSQUARE):
    sq = square(solution, width, height)
    data = restore(sq, scramble_string(replace_chars(sq, ignore_chars), key))
    return square(data, height, width)


def scramble_string(s, key):
    """
    s is the puzzle's solution in column-major order, omitting black squares:
    i.e. if the puzzle is:
        C A T
        # # A
        # # R
    solution is CATAR


    Key is a 4-digit number in the range 1000 <= key <= 9999

    """
    key = key_digits(key)
    check_letters(s)
    for k in key:          # foreach digit in the key
        s = shift(s, key)  # for each char by each digit in the key in sequence
        s = rotate(s, k)   # cut the sequence around the key digit
        s = shuffle(s)     # do a 1:1 shuffle of the 'deck'

    return s


def unscramble_solution(scrambled, width, height, key, ignore_chars=BLACKSQUARE):
    # width and height are reversed here
    sq = square(scrambled, width, height)
    data = restore(sq, unscramble_string(replace_chars(sq, ignore_chars), key))
    return square(data, height, width)


def unscramble_string(s, key):
    key = key_digits(key)
    check_letters(s)
    for k in key[::-1]:
        s = unshuffle(s)
        s = rotate(s, -k)
        s = unshift(s, key)

    return s


def scrambled_cksum(grid, width, height, ignore_chars=BLACKSQUARE,
                    encoding=ENCODING, errors='strict'):
    """
    Checksum of the grid's squares in column-major order, blocks left out.
    This is the value a locked file keeps to check an unlock key against.
    """
    data = replace_chars(square(grid, width, height), ignore_chars)
    return data_cksum(data.encode(encoding, errors))


def key_digits(key):
    digits = str(key)
    if len(digits) != 4 or not digits.isdigit() or digits[0] == '0':
        raise InvalidKey('key must be a number from 1000 to 9999: {!r}'.format(key))
    return [int(c) for c in digits]


def check_letters(s):
    bad = set(s) - set(ATOZ)
    if bad:
        raise ScrambleError(
            'only A-Z can be scrambled, found {}'.format(''.join(sorted(bad))))


def replace_chars(s, chars, replacement=''):
    for ch in chars:
        s = s.replace(ch, replacement)
    return s


def square(data, w, h):
    aa = [data[i:i+w] for i in range(0, len(data), w)]
    return ''.join(
        [''.join([aa[r][c] for r in range(0, h)]) for c in range(0, w)]
    )


def shift(s, key):
    return ''.join(
        ATOZ[(ATOZ.index(c) + key[i % len(key)]) % len(ATOZ)]
        for i, c in enumerate(s)
    )


def unshift(s, key):
    return shift(s, [-k for k in key])


def rotate(s, k):
    if not s:
        return s
    k %= len(s)
    return s[k:] + s[:k]


def shuffle(s):
    if len(s) < 2:
        return s
    mid = len(s) // 2
    items = functools.reduce(operator.add, zip(s[mid:], s[:mid]))
    return ''.join(items) + (s[-1] if len(s) % 2 else '')


def unshuffle(s):
    return s[1::2] + s[::2]


def restore(s, t):
    """
    s is the source string, it can contain '.'
    t is the target, it's smaller than s by the number of '.'s in s

    Each char in s is replaced by the corresponding
    char in t, jumping over '.'s in s.

    >>> restore('ABC.DEF', 'XYZABC')
    'XYZ.ABC'
    """
    t = (c for c in t)
    return ''.join(next(t) if not is_blacksquare(c) else c for c in s)
