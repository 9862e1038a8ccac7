"""Extra sections: optional tagged blocks that follow the clue text.

Each section is stored on the wire as

    tag (4 bytes) | length (u16) | checksum (u16) | payload | NUL

where length and checksum cover the payload without its terminator. A
section decodes its payload when it is created; edits mark it modified, and
commit() re-encodes it before the puzzle is written. Sections that were never
edited are written back byte for byte.
"""

import collections
import logging
import struct

from .checksum import data_cksum
from .errors import (ExtraChecksumMismatch, ExtraLengthMismatch, InvalidMask,
                     PuzzleError, PuzzleFormatError)

EXTENSION_HEADER_FORMAT = '< 4s  H H '

ENCODING = 'ISO-8859-1'

logger = logging.getLogger(__name__)


def enum(**enums):
    return type('Enum', (), enums)


GridMarkup = enum(
    # marked incorrect at some point
    PreviouslyIncorrect=0x10,
    # currently showing incorrect
    Incorrect=0x20,
    # user got a hint
    Revealed=0x40,
    # circled
    Circled=0x80
)


# refer to Extensions as Extensions.Rebus, Extensions.Markup
Extensions = enum(
    # grid of rebus indices: 0 for non-rebus;
    # i+1 for key i into RebusSolutions map
    Rebus=b'GRBS',
    # map of rebus solution entries eg 0:HEART;1:DIAMOND;17:CLUB;23:SPADE;
    RebusSolutions=b'RTBL',
    # timer state: 'a,b' where a is the number of seconds elapsed and
    # b is 1 if the timer is stopped, 0 if it is running
    Timer=b'LTIM',
    # grid cell markup, see GridMarkup
    Markup=b'GEXT',
    # user's rebus entries
    RebusFill=b'RUSR'
)


class Extra:
    """Base class for the five section kinds."""
    tag = None

    def __init__(self, geometry, payload, length=None, checksum=None,
                 encoding=ENCODING):
        self.geometry = geometry
        self.encoding = encoding
        self.payload = payload
        self.length = len(payload) - 1 if length is None else length
        self.checksum = (data_cksum(payload[:-1]) if checksum is None
                         else checksum)
        self.modified = False
        # set by the puzzle on a GEXT it made up because the file had none
        self.synthesized = False
        self.decode(payload[:-1])

    @classmethod
    def create(cls, geometry, encoding=ENCODING):
        return cls(geometry, cls.empty_data(geometry) + b'\0',
                   encoding=encoding)

    @classmethod
    def empty_data(cls, geometry):
        return b''

    @property
    def name(self):
        return self.tag.decode('ascii')

    def decode(self, data):
        raise NotImplementedError

    def encode(self):
        raise NotImplementedError

    def verify(self):
        data_length = len(self.payload) - 1
        if data_length != self.length:
            raise ExtraLengthMismatch(
                'bad length for extra {}: {} vs declared {}'.format(
                    self.name, data_length, self.length))
        cksum = data_cksum(self.payload[:-1])
        if cksum != self.checksum:
            raise ExtraChecksumMismatch(
                'bad checksum for extra {}: {} vs declared {}'.format(
                    self.name, cksum, self.checksum))

    def commit(self):
        if self.modified:
            data = self.encode()
            self.payload = data + b'\0'
            self.length = len(data)
            self.checksum = data_cksum(data)
            self.modified = False

    def tobytes(self):
        self.commit()
        return struct.pack(EXTENSION_HEADER_FORMAT, self.tag,
                           self.length, self.checksum) + self.payload


class CellGridExtra(Extra):
    """A section holding one byte per grid cell."""

    @classmethod
    def empty_data(cls, geometry):
        return b'\0' * geometry.cell_count

    def decode(self, data):
        if len(data) != self.geometry.cell_count:
            raise PuzzleFormatError(
                'extra {} holds {} cells, grid has {}'.format(
                    self.name, len(data), self.geometry.cell_count))
        self.cells = parse_bytes(data)

    def encode(self):
        return pack_bytes(self.cells)

    def blank(self):
        self.cells = [0] * self.geometry.cell_count
        self.modified = True


class GRBS(CellGridExtra):
    """Where rebus squares are in the solution."""
    tag = Extensions.Rebus

    def rebus_number_at(self, row, col):
        """Raw GRBS value for a square: 0 for none, n+1 for RTBL key n.

        Blocks and squares off the grid have no rebus.
        """
        if not self.geometry.is_letter(row, col):
            return 0
        return self.cells[self.geometry.rc2idx(row, col)]

    def rebus_index_at(self, row, col):
        number = self.rebus_number_at(row, col)
        return number - 1 if number else None

    def is_rebus(self, row, col):
        return bool(self.rebus_number_at(row, col))

    def set_rebus_index(self, row, col, index):
        if not 0 <= index < 255:
            raise PuzzleError('rebus index out of range: {}'.format(index))
        self.cells[self.geometry.rc2idx(row, col)] = index + 1
        self.modified = True

    def clear_rebus(self, row, col):
        self.cells[self.geometry.rc2idx(row, col)] = 0
        self.modified = True

    def rebus_squares(self):
        return [i for i, b in enumerate(self.cells) if b]

    def has_rebus(self):
        return any(self.cells)


class RTBL(Extra):
    """Rebus solutions, keyed by the number GRBS squares refer to."""
    tag = Extensions.RebusSolutions

    def decode(self, data):
        try:
            self.rebuses = parse_dict(data.decode(self.encoding))
        except ValueError:
            raise PuzzleFormatError('malformed rebus table: {!r}'.format(data))

    def encode(self):
        return dict_to_string(self.rebuses).encode(self.encoding)

    def __contains__(self, n):
        return n in self.rebuses

    def get(self, n):
        return self.rebuses.get(n)

    def set(self, n, value):
        self.rebuses[n] = value
        self.modified = True

    def remove(self, n):
        del self.rebuses[n]
        self.modified = True

    def index_of(self, value):
        for n, v in self.rebuses.items():
            if v == value:
                return n
        return None

    def next_index(self):
        return max(self.rebuses, default=-1) + 1


class LTIM(Extra):
    """Timer state.

    Only the state is stored here; keeping a clock running is up to the
    caller.
    """
    tag = Extensions.Timer

    @classmethod
    def empty_data(cls, geometry):
        return b'0,0'

    def decode(self, data):
        try:
            elapsed, stopped = data.decode(self.encoding).split(',')
            self.elapsed = int(elapsed)
            self.stopped = int(stopped)
        except ValueError:
            raise PuzzleFormatError('malformed timer: {!r}'.format(data))
        if self.stopped not in (0, 1):
            raise PuzzleFormatError('bad timer flag: {}'.format(self.stopped))

    def encode(self):
        return '{},{}'.format(self.elapsed, self.stopped).encode(self.encoding)

    @property
    def is_running(self):
        return not self.stopped

    def start(self):
        self.stopped = 0
        self.modified = True

    def stop(self):
        self.stopped = 1
        self.modified = True

    def set_elapsed(self, seconds):
        if seconds < 0:
            raise ValueError('elapsed time cannot be negative')
        self.elapsed = int(seconds)
        self.modified = True

    @staticmethod
    def format_time(seconds):
        m, s = divmod(seconds, 60)
        h, m = divmod(m, 60)

        ch = '{h:02d}:'.format(h=h) if h else '   '
        return '{ch}{m:02d}:{s:02d}'.format(ch=ch, m=m, s=s)

    def display_format(self):
        return self.format_time(self.elapsed)


class GEXT(CellGridExtra):
    """Per-square markup flags for the current fill."""
    tag = Extensions.Markup

    PREV_INCORRECT = GridMarkup.PreviouslyIncorrect
    CURR_INCORRECT = GridMarkup.Incorrect
    REVEALED = GridMarkup.Revealed
    CIRCLED = GridMarkup.Circled

    FLAGS = (PREV_INCORRECT, CURR_INCORRECT, REVEALED, CIRCLED)

    # flags dropped when the key flag is set; circles are never dropped
    CLEARS = {
        PREV_INCORRECT: CURR_INCORRECT | REVEALED,
        CURR_INCORRECT: PREV_INCORRECT | REVEALED,
        REVEALED: PREV_INCORRECT | CURR_INCORRECT,
        CIRCLED: 0,
    }

    def check_mask(self, mask):
        if mask not in self.FLAGS:
            raise InvalidMask('bad mask:{}'.format(mask))

    def mask(self, row, col):
        return self.cells[self.geometry.rc2idx(row, col)]

    def has_mask(self, row, col, mask):
        self.check_mask(mask)
        return bool(self.mask(row, col) & mask)

    def set_mask(self, row, col, mask):
        self.check_mask(mask)
        idx = self.geometry.rc2idx(row, col)
        self.cells[idx] = (self.cells[idx] | mask) & ~self.CLEARS[mask]
        self.modified = True

    def clear_mask(self, row, col, mask):
        self.check_mask(mask)
        idx = self.geometry.rc2idx(row, col)
        self.cells[idx] &= ~mask
        self.modified = True

    def has_markup(self):
        return any(self.cells)

    def markup_squares(self):
        return [i for i, b in enumerate(self.cells) if b]


class RUSR(Extra):
    """User rebus entries, kept as opaque bytes."""
    tag = Extensions.RebusFill

    def decode(self, data):
        self.data = data

    def encode(self):
        return self.data


SECTION_TYPES = collections.OrderedDict(
    (cls.tag, cls) for cls in (GRBS, RTBL, LTIM, GEXT, RUSR))

# order sections are written in, regardless of the order they were read
CANONICAL_ORDER = tuple(SECTION_TYPES)


def read_section(tag, geometry, length, checksum, payload, encoding=ENCODING):
    section = SECTION_TYPES[tag](geometry, payload, length, checksum,
                                 encoding=encoding)
    logger.debug('read extra %s, %d bytes', section.name, length)
    return section


#
# functions for parsing / serializing primitives
#


def parse_bytes(s):
    return list(struct.unpack('B' * len(s), s))


def pack_bytes(a):
    return struct.pack('B' * len(a), *a)


# dict string format is k1:v1;k2:v2;...;kn:vn;
# (for whatever reason there's a trailing ';')
def parse_dict(s):
    d = collections.OrderedDict()
    for p in s.split(';'):
        if ':' in p:
            k, v = p.split(':', 1)
            d[int(k)] = v
    return d


def dict_to_string(d):
    return ''.join('{:02d}:{};'.format(k, v) for k, v in d.items())
