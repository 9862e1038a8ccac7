from .cli import main
from .errors import (ChecksumMismatch, ClueCountMismatch, DesignModeError,
                     ExtraChecksumMismatch, ExtraLengthMismatch, FormatError,
                     InvalidDirection, InvalidKey, InvalidLetter, InvalidMask,
                     OutOfBoundsCell, PuzzleError, PuzzleFormatError,
                     RebusReferenceError, ScrambleError)
from .puzzle import Puzzle, load, new_blank, read
from .clues import ACROSS, DOWN
from .extras import GEXT
