# json_errors.py
# Error taxonomy shared by the JSON tokenizer and validator
#
# =============================================================================
#  ERROR MODEL
# =============================================================================
#
# Every failure is a SyntaxError subclass so callers can catch one type at
# the boundary. The tokenizer raises LexError, the validator raises
# ValidationError, and LexError is a ValidationError, so the first failure
# anywhere in the pipeline reaches the caller unchanged.
#
# Positions are reported as a 0-based character offset plus 1-based line and
# column, computed lazily from the offset only when an error is raised.
# =============================================================================

from enum import Enum
from typing import NamedTuple, Optional, Union


class ErrorKind(Enum):
    # Lexical
    UNEXPECTED_CHARACTER = "UnexpectedCharacter"
    INVALID_STRING       = "InvalidString"
    INVALID_NUMBER       = "InvalidNumber"
    INVALID_ENCODING     = "InvalidEncoding"
    # Grammar
    UNEXPECTED_TOKEN     = "UnexpectedToken"
    EXPECTED_TOKEN       = "ExpectedToken"
    EXPECTED_STRING      = "ExpectedString"
    UNEXPECTED_EOF       = "UnexpectedEof"
    TRAILING_DATA        = "TrailingData"
    TOO_DEEP             = "TooDeep"
    DUPLICATE_KEY        = "DuplicateKey"

    @property
    def is_lexical(self) -> bool:
        return self in _LEXICAL_KINDS

    def __str__(self) -> str:
        return self.value


_LEXICAL_KINDS = frozenset({
    ErrorKind.UNEXPECTED_CHARACTER,
    ErrorKind.INVALID_STRING,
    ErrorKind.INVALID_NUMBER,
    ErrorKind.INVALID_ENCODING,
})


class Position(NamedTuple):
    """Location of a failure: absolute offset, 1-based line and column."""
    offset: int
    line: int
    column: int

    @classmethod
    def locate(cls, text: Union[str, bytes], offset: int) -> "Position":
        """
        Derive line/column for ``offset`` in ``text``. Only LF ends a line.

        ``text`` may be undecoded bytes, in which case offset and column
        count bytes rather than characters.
        """
        newline = b"\n" if isinstance(text, bytes) else "\n"
        offset = max(0, min(offset, len(text)))
        line = text.count(newline, 0, offset) + 1
        column = offset - (text.rfind(newline, 0, offset) + 1) + 1
        return cls(offset, line, column)

    def __str__(self) -> str:
        return f"line {self.line} column {self.column} (offset {self.offset})"


class ValidationError(SyntaxError):
    """
    First failure of a validation run.

    ``kind`` is an ErrorKind, ``position`` a Position. ``expected`` and
    ``found`` are set for token-mismatch errors and describe the grammar
    symbol wanted and the token actually seen.
    """

    def __init__(self, kind: ErrorKind, message: str, position: Position,
                 expected: Optional[str] = None, found: Optional[str] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.position = position
        self.expected = expected
        self.found = found

    def __str__(self) -> str:
        return f"{self.kind}: {self.message} at {self.position}"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.kind.name}, {self.message!r}, {tuple(self.position)!r})"


class LexError(ValidationError):
    """Raised by the tokenizer. Always carries one of the lexical kinds."""
