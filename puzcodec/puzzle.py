import logging
import struct

from . import checksum
from . import extras
from . import scramble
from .checksum import CHECKSUM_KINDS, data_cksum
from .clues import ClueNumbering, check_direction
from .errors import (ChecksumMismatch, ClueCountMismatch, DesignModeError,
                     FormatError, InvalidLetter, OutOfBoundsCell,
                     PuzzleFormatError, RebusReferenceError)
from .extras import (CANONICAL_ORDER, EXTENSION_HEADER_FORMAT, GEXT, GRBS,
                     LTIM, RTBL, SECTION_TYPES, Extensions)
from .geometry import BLACKSQUARE, Geometry

logger = logging.getLogger(__name__)

HEADER_FORMAT = '''<
             H 12s        H
             4s 4s   4s  2sH
             12s         BBH
             H H '''

ENCODING = 'ISO-8859-1'
ENCODING_UTF8 = 'UTF-8'
ENCODING_ERRORS = 'strict'  # raises an exception for bad chars; change to 'replace' for laxer handling

ACROSSDOWN = b'ACROSS&DOWN\0'

EMPTY = '-'


def enum(**enums):
    return type('Enum', (), enums)


PuzzleType = enum(
    Normal=0x0001
)

SolutionState = enum(
    # solution is available in plaintext
    Unlocked=0x0000,
    # solution is locked (scrambled) with a key
    Locked=0x0004
)


def read(filename, verify=True, encoding_errors=ENCODING_ERRORS):
    """
    Read a .puz file and return the Puzzle object.
    throws PuzzleFormatError if there's any problem with the file format.
    """
    with open(filename, 'rb') as f:
        return load(f.read(), verify=verify, encoding_errors=encoding_errors)


def load(data, verify=True, encoding_errors=ENCODING_ERRORS):
    """
    Read .puz file data and return the Puzzle object.
    throws PuzzleFormatError if there's any problem with the file format.
    """
    puz = Puzzle(encoding_errors=encoding_errors)
    puz.load(data, verify=verify)
    return puz


def new_blank(width, height):
    """Start an empty puzzle in design mode.

    Every square starts out as a block; set solution letters, clues and text
    fields, then call Puzzle.finish_design().
    """
    if not (0 < width < 256 and 0 < height < 256):
        raise OutOfBoundsCell('bad grid size: {}x{}'.format(width, height))
    puz = Puzzle()
    puz.design_mode = True
    puz.width = width
    puz.height = height
    puz.solution = BLACKSQUARE * (width * height)
    puz.fill = BLACKSQUARE * (width * height)
    puz.refresh_geometry()
    puz.add_blank_markup()
    return puz


class Puzzle:
    """Represents a puzzle
    """
    def __init__(self, encoding_errors=ENCODING_ERRORS):
        """Initializes a blank puzzle
        """
        self.preamble = b''
        self.postscript = b''
        self.title = ''
        self.author = ''
        self.copyright = ''
        self.width = 0
        self.height = 0
        self.fileversion = b'1.3\0'  # default
        self.encoding = ENCODING
        self.encoding_errors = encoding_errors
        self.file_magic = ACROSSDOWN
        # stored checksums, as read from the header
        self.board_checksum = 0
        self.cib_checksum = 0
        self.masked_low_checksums = '00000000'
        self.masked_high_checksums = '00000000'
        # these are bytes that might be unused
        self.unk1 = b'\0' * 2
        self.unk2 = b'\0' * 12
        self.scrambled_checksum = 0
        self.n_clues = 0
        self.bitmask = PuzzleType.Normal
        self.scrambled_tag = SolutionState.Unlocked
        self.fill = ''
        self.solution = ''
        self.clues = []
        self.notes = ''
        self.extras = {}
        self.design_mode = False
        self.geometry = Geometry(0, 0, frozenset())
        self.numbering = None

    def load(self, data, verify=True):
        self.parse(data)
        if verify:
            self.verify()
        self.build_clue_map()

    def parse(self, data):
        """Read the puzzle structure without checking its integrity."""
        s = PuzzleBuffer(data)

        # advance to start - files may contain some data before the
        # start of the puzzle use the ACROSS&DOWN magic string as a waypoint
        # save the preamble for round-tripping
        if not s.seek_to(ACROSSDOWN, -2) or s.pos < 0:
            raise FormatError("Data does not appear to represent a "
                              "puzzle. Are you sure you didn't intend "
                              "to use read?")

        self.preamble = s.data[:s.pos]

        puzzle_data = s.unpack(HEADER_FORMAT)
        self.board_checksum = puzzle_data[0]
        self.file_magic = puzzle_data[1]
        self.cib_checksum = puzzle_data[2]
        self.masked_low_checksums = puzzle_data[3].hex()
        self.masked_high_checksums = puzzle_data[4].hex()
        self.fileversion = puzzle_data[5]
        # since we don't know the role of these bytes, just round-trip them
        self.unk1 = puzzle_data[6]
        self.scrambled_checksum = puzzle_data[7]
        self.unk2 = puzzle_data[8]
        self.width = puzzle_data[9]
        self.height = puzzle_data[10]
        self.n_clues = puzzle_data[11]
        self.bitmask = puzzle_data[12]
        self.scrambled_tag = puzzle_data[13]

        # Once we have fileversion we can guess the encoding
        self.encoding = ENCODING if self.version_tuple()[0] < 2 else ENCODING_UTF8
        s.encoding = self.encoding
        s.errors = self.encoding_errors

        self.solution = self.decode(s.read_exactly(self.width * self.height))
        self.fill = self.decode(s.read_exactly(self.width * self.height))
        self.refresh_geometry()

        self.title = s.read_string()
        self.author = s.read_string()
        self.copyright = s.read_string()

        self.clues = [s.read_string() for i in range(0, self.n_clues)]
        self.notes = s.read_string()

        self.extras = {}
        while s.can_unpack(EXTENSION_HEADER_FORMAT):
            code, length, cksum = s.peek(EXTENSION_HEADER_FORMAT)
            if code not in SECTION_TYPES:
                logger.warning('unknown extra section %r, keeping the rest '
                               'of the data as is', code)
                break
            if code in self.extras:
                raise PuzzleFormatError(
                    'extra {} appears twice'.format(code.decode('ascii')))
            s.unpack(EXTENSION_HEADER_FORMAT)
            # extension data is represented as a null-terminated string,
            # but since the data can contain nulls we can't use read_string
            payload = s.read_exactly(length + 1)
            self.extras[code] = extras.read_section(
                code, self.geometry, length, cksum, payload,
                encoding=self.encoding)

        # sometimes there's some extra garbage at
        # the end of the file, usually \r\n
        if s.can_read():
            self.postscript = s.read_to_end()

        # checking and revealing always write through GEXT
        if self.gext is None:
            logger.warning('no GEXT section in puzzle, creating a blank one')
            self.add_blank_markup()

        return self

    def add_blank_markup(self):
        gext = GEXT.create(self.geometry, encoding=self.encoding)
        gext.synthesized = True
        self.extras[Extensions.Markup] = gext

    def refresh_geometry(self):
        self.geometry = Geometry.from_grid(self.solution, self.width, self.height)
        for section in self.extras.values():
            section.geometry = self.geometry

    def verify(self):
        """Check integrity: clue count, checksums, extras and rebuses.

        Stops at the first problem found.
        """
        if self.is_scrambled():
            logger.info('puzzle is scrambled')

        if len(self.clues) != self.n_clues:
            raise ClueCountMismatch(
                'wrong number of clues: {} expected: {}'.format(
                    len(self.clues), self.n_clues))

        for kind in CHECKSUM_KINDS:
            self.verify_checksum(kind)

        for code in CANONICAL_ORDER:
            if code in self.extras:
                self.extras[code].verify()

        self.verify_rebuses()

    def verify_rebuses(self):
        grbs = self.grbs
        if grbs is None:
            return
        rtbl = self.rtbl

        referenced = set()
        for r in range(self.height):
            for c in range(self.width):
                index = grbs.rebus_index_at(r, c)
                if index is None:
                    continue
                if rtbl is None or index not in rtbl:
                    raise RebusReferenceError(
                        'rebus {} at row:{}, col:{} has no matching '
                        'definition'.format(index, r, c))
                referenced.add(index)

        if rtbl is not None:
            unused = [n for n in rtbl.rebuses if n not in referenced]
            if unused:
                logger.warning('rebuses defined but not used in the '
                               'solution: %s', unused)

    def compute_checksum(self, kind):
        if kind == 'cib':
            return checksum.header_cksum(self.width, self.height, self.n_clues,
                                         self.bitmask, self.scrambled_tag)
        elif kind == 'board':
            cksum = self.compute_checksum('cib')
            cksum = data_cksum(self.encode(self.solution), cksum)
            cksum = data_cksum(self.encode(self.fill), cksum)
            # extensions are not included in the board checksum
            return self.text_cksum(cksum)
        elif kind == 'masked_base':
            return self.text_cksum()
        elif kind in ('masked_low', 'masked_high'):
            low, high = checksum.masked_cksums([
                self.compute_checksum('cib'),
                data_cksum(self.encode(self.solution)),
                data_cksum(self.encode(self.fill)),
                self.text_cksum()
            ])
            return low if kind == 'masked_low' else high
        raise ValueError("don't know about checksum type: {!r}".format(kind))

    def text_cksum(self, cksum=0):
        return checksum.text_cksum(
            self.encode(self.title), self.encode(self.author),
            self.encode(self.copyright),
            [self.encode(clue) for clue in self.clues],
            self.encode(self.notes), cksum)

    def stored_checksum(self, kind):
        return {
            'cib': self.cib_checksum,
            'board': self.board_checksum,
            'masked_low': self.masked_low_checksums,
            'masked_high': self.masked_high_checksums,
        }[kind]

    def verify_checksum(self, kind):
        computed = self.compute_checksum(kind)
        expected = self.stored_checksum(kind)
        if computed != expected:
            raise ChecksumMismatch(kind, computed, expected)
        return computed

    def update_checksums(self):
        self.cib_checksum = self.compute_checksum('cib')
        self.board_checksum = self.compute_checksum('board')
        self.masked_low_checksums = self.compute_checksum('masked_low')
        self.masked_high_checksums = self.compute_checksum('masked_high')

    def build_clue_map(self):
        """Rebuild the clue map and clue lists from the block layout."""
        self.refresh_geometry()
        numbering = ClueNumbering(self.geometry)
        if not self.design_mode and numbering.clue_count() != self.n_clues:
            raise ClueCountMismatch(
                'grid has {} answers but puzzle has {} clues'.format(
                    numbering.clue_count(), self.n_clues))
        self.numbering = numbering
        return numbering

    def require_numbering(self):
        if self.numbering is None:
            raise DesignModeError(
                'grid has not been numbered yet; call build_clue_map()')
        return self.numbering

    @property
    def clue_map(self):
        return self.require_numbering().cells

    @property
    def across_clues(self):
        return self.require_numbering().across

    @property
    def down_clues(self):
        return self.require_numbering().down

    def clue_text(self, clue):
        return self.clues[clue.clue_index] if clue.clue_index < len(self.clues) else ''

    def clue_for(self, row, col, direction):
        self.check_letter_cell(row, col)
        return self.require_numbering().clue_at(self.rc2idx(row, col), direction)

    def save(self, filename):
        puzzle_bytes = self.tobytes()
        with open(filename, 'wb') as f:
            f.write(puzzle_bytes)

    def tobytes(self):
        """
        Serialize the puzzle. Header checksums are computed from the current
        contents, so a file loaded with bad checksums is written with good
        ones; the stored checksum fields themselves are left alone.
        """
        s = PuzzleBuffer(encoding=self.encoding, errors=self.encoding_errors)
        cksums = {kind: self.compute_checksum(kind) for kind in CHECKSUM_KINDS}

        # include any preamble text we might have found on read
        s.write(self.preamble)

        s.pack(HEADER_FORMAT,
               cksums['board'], self.file_magic,
               cksums['cib'],
               bytes.fromhex(cksums['masked_low']),
               bytes.fromhex(cksums['masked_high']),
               self.fileversion, self.unk1, self.scrambled_checksum,
               self.unk2, self.width, self.height,
               self.n_clues, self.bitmask, self.scrambled_tag)

        s.write(self.encode(self.solution))
        s.write(self.encode(self.fill))

        s.write_string(self.title)
        s.write_string(self.author)
        s.write_string(self.copyright)

        for clue in self.clues:
            s.write_string(clue)

        s.write_string(self.notes)

        for code in CANONICAL_ORDER:
            section = self.extras.get(code)
            if section is None:
                continue
            # a made-up GEXT is only worth writing once it holds markup
            if section.synthesized and not section.has_markup():
                continue
            s.write(section.tobytes())

        s.write(self.postscript)

        return s.tobytes()

    def encode(self, s):
        return s.encode(self.encoding, self.encoding_errors)

    def decode(self, b):
        return b.decode(self.encoding, self.encoding_errors)

    def version_tuple(self):
        version = self.fileversion[:3]
        try:
            return tuple(map(int, version.split(b'.')))
        except ValueError:
            raise FormatError('bad file version: {!r}'.format(self.fileversion))

    # grid queries

    def rc2idx(self, row, col):
        return self.geometry.rc2idx(row, col)

    def idx2rc(self, index):
        return self.geometry.idx2rc(index)

    def is_black(self, row, col):
        return self.solution[self.rc2idx(row, col)] == BLACKSQUARE

    def is_letter(self, row, col):
        """Whether row,col is a playable square: on the grid and not a block."""
        return self.geometry.in_bounds(row, col) and not self.is_black(row, col)

    def check_letter_cell(self, row, col):
        if not self.is_letter(row, col):
            raise OutOfBoundsCell('bad row:{}, col:{}'.format(row, col))

    def solution_letter_at(self, row, col):
        """
        Letter from the solution grid. For a scrambled puzzle this is the
        scrambled letter, not the true one.
        """
        return self.solution[self.rc2idx(row, col)]

    def letter_at(self, row, col):
        return self.fill[self.rc2idx(row, col)]

    def word_cells(self, row, col, direction):
        check_direction(direction)
        self.check_letter_cell(row, col)
        return self.require_numbering().word_cells(self.rc2idx(row, col),
                                                   direction)

    def word_at(self, row, col, direction):
        return ''.join(self.fill[i] for i in self.word_cells(row, col, direction))

    def solution_word_at(self, row, col, direction):
        return ''.join(self.solution[i]
                       for i in self.word_cells(row, col, direction))

    def is_scrambled(self):
        return self.scrambled_checksum > 0

    # extras

    @property
    def grbs(self):
        return self.extras.get(Extensions.Rebus)

    @property
    def rtbl(self):
        return self.extras.get(Extensions.RebusSolutions)

    @property
    def ltim(self):
        return self.extras.get(Extensions.Timer)

    @property
    def gext(self):
        return self.extras.get(Extensions.Markup)

    @property
    def rusr(self):
        return self.extras.get(Extensions.RebusFill)

    def has_rebus(self):
        return self.grbs is not None and self.grbs.has_rebus()

    def rebus_solution_at(self, row, col):
        if self.grbs is None or self.rtbl is None:
            return None
        index = self.grbs.rebus_index_at(row, col)
        return None if index is None else self.rtbl.get(index)

    def set_timer(self, elapsed=None, running=None):
        ltim = self.ltim
        if ltim is None:
            ltim = self.extras[Extensions.Timer] = LTIM.create(
                self.geometry, encoding=self.encoding)
        if elapsed is not None:
            ltim.set_elapsed(elapsed)
        if running is not None:
            if running:
                ltim.start()
            else:
                ltim.stop()
        return ltim

    # filling, checking and revealing

    def _set_fill(self, idx, letter):
        self.fill = self.fill[:idx] + letter + self.fill[idx + 1:]

    def set_letter_at(self, row, col, letter):
        """Enter a letter in the fill. Only A-Z are accepted.

        Returns whether the letter was written. Overwriting a square marked
        incorrect leaves it marked as previously incorrect.
        """
        self.check_letter_cell(row, col)
        letter = letter[:1].upper()
        if not ('A' <= letter <= 'Z'):
            return False
        self._set_fill(self.rc2idx(row, col), letter)
        self._demote_incorrect(row, col)
        return True

    def clear_letter_at(self, row, col):
        self.check_letter_cell(row, col)
        self._set_fill(self.rc2idx(row, col), EMPTY)
        self._demote_incorrect(row, col)

    def _demote_incorrect(self, row, col):
        if self.gext.has_mask(row, col, GEXT.CURR_INCORRECT):
            self.gext.set_mask(row, col, GEXT.PREV_INCORRECT)

    def check_letter(self, row, col):
        """
        Compare the entry at row,col with the solution, marking it currently
        incorrect if it differs. Returns None for a scrambled puzzle, whose
        letters can't be checked one at a time.
        """
        self.check_letter_cell(row, col)
        if self.is_scrambled():
            return None
        if self.letter_at(row, col) != self.solution_letter_at(row, col):
            self.gext.set_mask(row, col, GEXT.CURR_INCORRECT)
            return False
        return True

    def check_word(self, row, col, direction):
        cells = self.word_cells(row, col, direction)
        if self.is_scrambled():
            return None
        results = [self.check_letter(*self.idx2rc(i)) for i in cells]
        return all(results)

    def check_all(self):
        """
        Check the whole grid. A scrambled puzzle is checked against its
        scrambled checksum, and no markup is set either way.
        """
        letter_cells = sorted(self.require_numbering().cells)
        if self.is_scrambled():
            cksum = self.scrambled_cksum(self.fill)
            logger.debug('scrambled checksum: %d, fill checksum: %d',
                         self.scrambled_checksum, cksum)
            return cksum == self.scrambled_checksum
        results = [self.check_letter(*self.idx2rc(i)) for i in letter_cells]
        return all(results)

    def reveal_letter(self, row, col):
        self.check_letter_cell(row, col)
        if self.is_scrambled():
            return None
        sol = self.solution_letter_at(row, col)
        if self.letter_at(row, col) == sol:
            return False
        self._set_fill(self.rc2idx(row, col), sol)
        self.gext.set_mask(row, col, GEXT.REVEALED)
        return True

    def reveal_word(self, row, col, direction):
        cells = self.word_cells(row, col, direction)
        if self.is_scrambled():
            return None
        return [self.reveal_letter(*self.idx2rc(i)) for i in cells].count(True)

    def reveal_all(self):
        letter_cells = sorted(self.require_numbering().cells)
        if self.is_scrambled():
            return None
        return [self.reveal_letter(*self.idx2rc(i))
                for i in letter_cells].count(True)

    # scrambling

    def scrambled_cksum(self, grid):
        return scramble.scrambled_cksum(grid, self.width, self.height,
                                        encoding=self.encoding,
                                        errors=self.encoding_errors)

    def lock_solution(self, key):
        """Scramble the solution with a four-digit key."""
        if self.is_scrambled():
            return
        scrambled = scramble.scramble_solution(self.solution, self.width,
                                               self.height, key)
        self.scrambled_checksum = self.scrambled_cksum(self.solution)
        self.scrambled_tag = SolutionState.Locked
        self.solution = scrambled

    def unlock_solution(self, key):
        """
        Unscramble the solution. Returns False, leaving the puzzle locked, if
        the key doesn't produce the solution the puzzle was locked with.
        """
        if not self.is_scrambled():
            return True
        unscrambled = scramble.unscramble_solution(self.solution, self.width,
                                                   self.height, key)
        if self.scrambled_cksum(unscrambled) != self.scrambled_checksum:
            return False

        # clear the scrambled bit and cksum
        self.solution = unscrambled
        self.scrambled_checksum = 0
        self.scrambled_tag = SolutionState.Unlocked
        return True

    # design mode

    def check_design_mode(self):
        if not self.design_mode:
            raise DesignModeError('puzzle is not in design mode')

    def set_solution_letter_at(self, row, col, letter):
        """Set one solution square to a letter A-Z, or to '.' for a block."""
        self.check_design_mode()
        idx = self.rc2idx(row, col)
        letter = letter.upper()
        if len(letter) != 1 or not ('A' <= letter <= 'Z' or letter == BLACKSQUARE):
            raise InvalidLetter('bad solution letter: {!r}'.format(letter))
        self.solution = self.solution[:idx] + letter + self.solution[idx + 1:]
        if letter == BLACKSQUARE:
            self._set_fill(idx, BLACKSQUARE)
        elif self.fill[idx] == BLACKSQUARE:
            self._set_fill(idx, EMPTY)
        self.refresh_geometry()

    def set_solution_rebus_at(self, row, col, value):
        """Put a multi-letter answer in one square, via GRBS and RTBL."""
        self.check_design_mode()
        value = value.upper()
        # ':' and ';' delimit RTBL entries
        if (not value or not 'A' <= value[0] <= 'Z'
                or set(value) & set(':;\0')):
            raise InvalidLetter('bad rebus: {!r}'.format(value))
        self.set_solution_letter_at(row, col, value[0])
        grbs = self.grbs
        if grbs is None:
            grbs = self.extras[Extensions.Rebus] = GRBS.create(
                self.geometry, encoding=self.encoding)
        rtbl = self.rtbl
        if rtbl is None:
            rtbl = self.extras[Extensions.RebusSolutions] = RTBL.create(
                self.geometry, encoding=self.encoding)
        index = rtbl.index_of(value)
        if index is None:
            index = rtbl.next_index()
            rtbl.set(index, value)
        grbs.set_rebus_index(row, col, index)

    def set_clues(self, clues):
        self.check_design_mode()
        self.clues = list(clues)
        self.n_clues = len(self.clues)

    def finish_design(self):
        """Number the grid, fill in checksums and leave design mode."""
        self.build_clue_map()
        if self.numbering.clue_count() != self.n_clues:
            raise ClueCountMismatch(
                'grid has {} answers but {} clues were set'.format(
                    self.numbering.clue_count(), self.n_clues))
        self.update_checksums()
        self.design_mode = False


class PuzzleBuffer:
    """PuzzleBuffer class
    wraps a data buffer ('' or []) and provides .puz-specific methods for
    reading and writing data
    """
    def __init__(self, data=None, encoding=ENCODING, errors=ENCODING_ERRORS):
        self.data = data or []
        self.encoding = encoding
        self.errors = errors
        self.pos = 0

    def can_read(self, n_bytes=1):
        return self.pos + n_bytes <= len(self.data)

    def length(self):
        return len(self.data)

    def read(self, n_bytes):
        start = self.pos
        self.pos += n_bytes
        return self.data[start:self.pos]

    def read_exactly(self, n_bytes):
        if not self.can_read(n_bytes):
            raise FormatError('data ends after {} bytes, expected {} more '
                              'at {}'.format(self.length(), n_bytes, self.pos))
        return self.read(n_bytes)

    def read_to_end(self):
        start = self.pos
        self.pos = self.length()
        return self.data[start:self.pos]

    def read_string(self):
        return self.read_until(b'\0')

    def read_until(self, c):
        start = self.pos
        if not self.seek_to(c, 1):  # read past
            raise FormatError('unterminated string at {}'.format(start))
        return str(self.data[start:self.pos-1], self.encoding, self.errors)

    def seek_to(self, s, offset=0):
        try:
            self.pos = self.data.index(s, self.pos) + offset
            return True
        except ValueError:
            # s not found, advance to end
            self.pos = self.length()
            return False

    def write(self, s):
        self.data.append(s)

    def write_string(self, s):
        s = s or ''
        self.data.append(s.encode(self.encoding, self.errors) + b'\0')

    def pack(self, struct_format, *values):
        self.data.append(struct.pack(struct_format, *values))

    def can_unpack(self, struct_format):
        return self.can_read(struct.calcsize(struct_format))

    def peek(self, struct_format):
        return struct.unpack_from(struct_format, self.data, self.pos)

    def unpack(self, struct_format):
        start = self.pos
        try:
            res = struct.unpack_from(struct_format, self.data, self.pos)
            self.pos += struct.calcsize(struct_format)
            return res
        except struct.error:
            message = 'could not unpack values at {} for format {}'.format(
                start, struct_format
            )
            raise FormatError(message)

    def tobytes(self):
        return b''.join(self.data)
