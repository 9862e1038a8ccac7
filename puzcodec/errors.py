"""Exceptions raised while reading, verifying and editing puzzles."""


class PuzzleError(Exception):
    """Base class for every error raised by puzcodec."""
    def __init__(self, message=''):
        super().__init__(message)
        self.message = message


class PuzzleFormatError(PuzzleError):
    """
    Indicates a problem with the puzzle data itself: bad headers, checksum
    validation failures, or inconsistent sections.
    """


class FormatError(PuzzleFormatError):
    """The data is not a puzzle, or is cut short."""


class ChecksumMismatch(PuzzleFormatError):
    def __init__(self, kind, computed, expected):
        super().__init__('bad {} checksum: computed {} vs stored {}'.format(
            kind, computed, expected))
        self.kind = kind
        self.computed = computed
        self.expected = expected


class ClueCountMismatch(PuzzleFormatError):
    pass


class ExtraLengthMismatch(PuzzleFormatError):
    pass


class ExtraChecksumMismatch(PuzzleFormatError):
    pass


class RebusReferenceError(PuzzleFormatError):
    """A GRBS square points at a rebus number missing from RTBL."""


class InvalidDirection(PuzzleError, ValueError):
    pass


class InvalidMask(PuzzleError, ValueError):
    pass


class OutOfBoundsCell(PuzzleError, IndexError):
    pass


class InvalidLetter(PuzzleError, ValueError):
    """A solution square only takes A-Z, or '.' for a block."""


class InvalidKey(PuzzleError, ValueError):
    pass


class ScrambleError(PuzzleError):
    pass


class DesignModeError(PuzzleError):
    """Solution and clue edits are only allowed on a puzzle being built."""
