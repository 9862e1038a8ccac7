"""Reading files assembled field by field from the documented layout."""

import pytest

import puzcodec
from puzcodec import ACROSS, DOWN

import helper

ENCODING = 'iso-8859-1'

# 2x1 grid 'AB', one clue 'X', no text fields; checksums worked out by hand:
#   cib   = 0x3000 (over 02 01 01 00 01 00 00 00)
#   board = 0x1206
#   solution 0x8062, fill 0x8043, text 0x0058, masked with ICHEATED
TINY = (b'\x06\x12' + b'ACROSS&DOWN\0' + b'\x00\x30' +
        bytes.fromhex('49210b1d') + bytes.fromhex('71d4c544') +
        b'1.3\0' + b'\0\0' + b'\0\0' + b'\0' * 12 +
        b'\x02\x01' + b'\x01\x00' + b'\x01\x00' + b'\x00\x00' +
        b'AB' + b'--' +
        b'\0' + b'\0' + b'\0' + b'X\0' + b'\0')


def cksum(data, c=0):
    for b in data:
        c = (((c >> 1) | ((c & 1) << 15)) + b) & 0xffff
    return c


def u16(n):
    return n.to_bytes(2, 'little')


def assemble(width, height, solution, fill, clues, title='', author='',
             copyright='', notes='', scrambled_checksum=0, scrambled_tag=0):
    """Lay out a .puz file by hand, offset by offset."""
    def enc(s):
        return s.encode(ENCODING)

    cib = cksum(bytes([width, height]) + u16(len(clues)) + u16(1) +
                u16(scrambled_tag))
    text = b''.join(enc(f) + b'\0' for f in (title, author, copyright) if f)
    text += b''.join(enc(clue) for clue in clues)
    if notes:
        text += enc(notes) + b'\0'

    parts = [cib, cksum(enc(solution)), cksum(enc(fill)), cksum(text)]
    board = cksum(text, cksum(enc(fill), cksum(enc(solution), cib)))
    low = bytes(m ^ (c & 0xff) for m, c in zip(b'ICHE', parts))
    high = bytes(m ^ (c >> 8) for m, c in zip(b'ATED', parts))

    header = (u16(board) + b'ACROSS&DOWN\0' + u16(cib) + low + high +
              b'1.3\0' + b'\0\0' + u16(scrambled_checksum) + b'\0' * 12 +
              bytes([width, height]) + u16(len(clues)) + u16(1) +
              u16(scrambled_tag))
    assert len(header) == 52

    strings = [title, author, copyright] + list(clues) + [notes]
    return (header + enc(solution) + enc(fill) +
            b''.join(enc(s) + b'\0' for s in strings))


def sample_bytes():
    solution = ''.join(helper.GRID)
    fill = ''.join('.' if c == '.' else '-' for c in solution)
    return assemble(7, 4, solution, fill, helper.CLUES,
                    title='Sample Puzzle', author='A. Setter',
                    copyright='(c) 2024 Sample Press',
                    notes='A small grid for testing.')


def test_assembler_matches_hand_checksums():
    assert assemble(2, 1, 'AB', '--', ['X']) == TINY


def test_load_tiny():
    p = puzcodec.load(TINY)
    assert p.cib_checksum == 0x3000
    assert p.board_checksum == 0x1206
    assert p.masked_low_checksums == '49210b1d'
    assert p.masked_high_checksums == '71d4c544'
    assert p.solution == 'AB'
    assert p.clues == ['X']
    assert p.word_at(0, 1, ACROSS) == '--'


def test_tiny_round_trip():
    assert puzcodec.load(TINY).tobytes() == TINY


@pytest.mark.parametrize('offset, kind', [
    (0, 'board'),
    (14, 'cib'),
    (16, 'masked_low'),
    (20, 'masked_high'),
])
def test_tiny_corrupted_checksum(offset, kind):
    data = bytearray(TINY)
    data[offset] ^= 1
    with pytest.raises(puzcodec.ChecksumMismatch) as excinfo:
        puzcodec.load(bytes(data))
    assert excinfo.value.kind == kind


def test_sample_fixture():
    p = puzcodec.load(sample_bytes())
    assert p.solution_letter_at(0, 0) == 'S'
    assert p.solution_word_at(0, 0, ACROSS) == 'STUMPS'
    assert p.solution_word_at(0, 0, DOWN) == 'STP'
    assert len(p.across_clues) == 3
    assert len(p.down_clues) == 4
    assert len(p.across_clues) + len(p.down_clues) == p.n_clues


def test_sample_fixture_round_trip():
    data = sample_bytes()
    assert puzcodec.load(data).tobytes() == data


def test_writer_matches_assembled_file():
    assert helper.puzzle_bytes(filled=False) == sample_bytes()


# 'ABCDE' locked with key 1234 reads 'PMNEK'
LOCKED = assemble(5, 1, 'PMNEK', '-----', ['X'],
                  scrambled_checksum=cksum(b'ABCDE'), scrambled_tag=4)


def test_unlock_assembled_locked_file():
    p = puzcodec.load(LOCKED)
    assert p.is_scrambled()
    assert p.unlock_solution(1234) is True
    assert p.solution == 'ABCDE'
    assert p.scrambled_checksum == 0


def test_lock_writes_same_file():
    p = puzcodec.new_blank(5, 1)
    for c, letter in enumerate('ABCDE'):
        p.set_solution_letter_at(0, c, letter)
    p.set_clues(['X'])
    p.finish_design()
    p.lock_solution(1234)
    assert p.tobytes() == LOCKED
