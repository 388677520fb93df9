# json_tokenizer.py
# Pull-based JSON tokenizer with one-token lookahead
#
# =============================================================================
#  TOKENIZER IMPLEMENTATION: ANCHORED REGEX SCANS, ONE TOKEN PER PULL
# =============================================================================
#
# The tokenizer never materializes a token list. Each call to next_token()
# skips JSON whitespace, classifies the next character and scans exactly one
# token with a regex anchored at the cursor. Memory stays bounded by the
# source buffer regardless of how many tokens the document holds.
#
# Strings and numbers are scanned in two stages:
# 1. Compiled regexes accept well-formed lexemes on the fast path. Strings
#    are matched as runs of plain characters between escapes, never as one
#    repetition per character.
# 2. Only when the fast path rejects the input does a character loop run to
#    classify the failure and report the exact offset.
#
# Numbers are taken greedily (longest run of number characters) and then
# checked against the RFC 8259 number grammar, so "01", "1." and "-" are
# reported as malformed numbers rather than as two adjacent tokens.
#
# =============================================================================
#  REFERENCES
# =============================================================================
# [1] RFC 8259 - The JavaScript Object Notation (JSON) Data Interchange Format
#     section 2 (whitespace), 6 (numbers), 7 (strings), 8.1 (encoding)
# =============================================================================

import re
from enum import Enum
from typing import Iterator, List, NamedTuple, Union

from json_errors import ErrorKind, LexError, Position

# ---------------------------------------------------------------------------
# CONSTANTS
# ---------------------------------------------------------------------------
JSON_WHITESPACE = " \t\n\r"      # RFC 8259 ws - nothing else is insignificant
_HEX_DIGITS     = "0123456789abcdefABCDEF"

_SIMPLE_ESCAPES = {
    '"': '"', "\\": "\\", "/": "/",
    "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t",
}

# ---------------------------------------------------------------------------
# REGEX BLUEPRINT
# ---------------------------------------------------------------------------
# [0-9] rather than \d: \d also matches non-ASCII digits in str patterns.
_WHITESPACE_RE = re.compile(r"[ \t\n\r]*")
_NUMBER_RUN_RE = re.compile(r"[0-9.eE+\-]+")
_NUMBER_RE     = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_STRING_RUN_RE = re.compile(r'[^"\\\x00-\x1f\ud800-\udfff]*')  # plain characters, one match per run
_STRING_ESC_RE = re.compile(r'\\(?:["\\/bfnrt]|u[0-9a-fA-F]{4})')
_ESCAPE_RE     = re.compile(
    r"\\u([dD][89abAB][0-9a-fA-F]{2})\\u([dD][c-fC-F][0-9a-fA-F]{2})"  # surrogate pair
    r"|\\u([0-9a-fA-F]{4})"
    r'|\\(["\\/bfnrt])'
)

# ---------------------------------------------------------------------------
# TOKEN RECORD
# ---------------------------------------------------------------------------
class TokenKind(Enum):
    OBJECT_OPEN  = "{"
    OBJECT_CLOSE = "}"
    ARRAY_OPEN   = "["
    ARRAY_CLOSE  = "]"
    COLON        = ":"
    COMMA        = ","
    STRING       = "string"
    NUMBER       = "number"
    TRUE         = "true"
    FALSE        = "false"
    NULL         = "null"
    END          = "end of input"


_STRUCTURAL = {
    "{": TokenKind.OBJECT_OPEN,
    "}": TokenKind.OBJECT_CLOSE,
    "[": TokenKind.ARRAY_OPEN,
    "]": TokenKind.ARRAY_CLOSE,
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
}

_KEYWORDS = {
    "t": ("true", TokenKind.TRUE),
    "f": ("false", TokenKind.FALSE),
    "n": ("null", TokenKind.NULL),
}


class Token(NamedTuple):
    """
    Immutable token record: (kind, value, offset).

    ``value`` is the decoded contents for STRING tokens and the source
    lexeme for everything else (empty for END). ``offset`` is the character
    offset of the token's first character.
    """
    kind: TokenKind
    value: str
    offset: int

    def describe(self) -> str:
        """Short human-readable form used in error messages."""
        if self.kind is TokenKind.END:
            return "end of input"
        if self.kind is TokenKind.STRING:
            shown = self.value if len(self.value) <= 20 else self.value[:17] + "..."
            return f"string {shown!r}"
        if self.kind is TokenKind.NUMBER:
            return f"number {self.value}"
        return f"'{self.value}'"


def _unescape(match) -> str:
    high, low, code, simple = match.groups()
    if high is not None:
        return chr(0x10000 + ((int(high, 16) - 0xD800) << 10) + (int(low, 16) - 0xDC00))
    if code is not None:
        return chr(int(code, 16))
    return _SIMPLE_ESCAPES[simple]


def _is_surrogate(ch: str) -> bool:
    return "\ud800" <= ch <= "\udfff"


def _decode_source(source: Union[str, bytes, bytearray]) -> str:
    """Accept text as-is; decode raw bytes as strict UTF-8."""
    if isinstance(source, str):
        return source
    raw = bytes(source)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise LexError(
            ErrorKind.INVALID_ENCODING,
            f"invalid UTF-8 byte 0x{raw[exc.start]:02X} ({exc.reason})",
            Position.locate(raw, exc.start),
        ) from None

# ---------------------------------------------------------------------------
# TOKENIZER
# ---------------------------------------------------------------------------
class Tokenizer:
    """
    Lazy token source over an immutable buffer.

    next_token() returns one Token per call and END once the buffer is
    exhausted (and on every call after that). reset() rewinds to the start;
    the sequence produced is a pure function of the buffer.
    """

    def __init__(self, source: Union[str, bytes, bytearray]):
        self.text: str = _decode_source(source)
        self._pos = 0

    @property
    def offset(self) -> int:
        return self._pos

    def reset(self) -> None:
        self._pos = 0

    def __iter__(self) -> Iterator[Token]:
        """Yield tokens from the current cursor up to and including END."""
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenKind.END:
                return

    def next_token(self) -> Token:
        text = self.text
        pos = _WHITESPACE_RE.match(text, self._pos).end()
        self._pos = pos
        if pos >= len(text):
            return Token(TokenKind.END, "", pos)

        ch = text[pos]
        kind = _STRUCTURAL.get(ch)
        if kind is not None:
            self._pos = pos + 1
            return Token(kind, ch, pos)
        if ch == '"':
            return self._scan_string(pos)
        if ch == "-" or "0" <= ch <= "9":
            return self._scan_number(pos)
        if ch in _KEYWORDS:
            word, kind = _KEYWORDS[ch]
            return self._scan_keyword(pos, word, kind)
        raise self._unexpected(pos)

    # -----------------------------------------------------------------------
    # SCANNERS
    # -----------------------------------------------------------------------
    def _scan_string(self, start: int) -> Token:
        """
        Scan alternating runs of plain characters and single escapes.

        Each regex match covers one run or one escape, so matching keeps no
        per-character state however long the string is.
        """
        text = self.text
        n = len(text)
        i = start + 1
        while True:
            i = _STRING_RUN_RE.match(text, i).end()
            if i >= n:
                raise self._diagnose_string(start)
            ch = text[i]
            if ch == '"':
                break
            m = _STRING_ESC_RE.match(text, i) if ch == "\\" else None
            if m is None:
                raise self._diagnose_string(start)
            i = m.end()
        self._pos = i + 1
        inner = text[start + 1:i]
        if "\\" in inner:
            inner = _ESCAPE_RE.sub(_unescape, inner)
        return Token(TokenKind.STRING, inner, start)

    def _diagnose_string(self, start: int) -> LexError:
        """
        Locate why the string starting at ``start`` was rejected.

        Handles four classes of errors with precise offsets:
        1) Escape syntax - unknown single escape, short or non-hex \\u escape.
        2) Raw control characters below U+0020.
        3) Lone surrogates smuggled in from a lossy decode.
        4) Structural issues - EOF before the closing quote.
        """
        text = self.text
        n = len(text)
        i = start + 1
        while i < n:
            ch = text[i]
            if ch == '"':
                break
            if ch == "\\":
                if i + 1 >= n:
                    break
                esc = text[i + 1]
                if esc == "u":
                    hexpart = text[i + 2:i + 6]
                    if len(hexpart) < 4 or not all(c in _HEX_DIGITS for c in hexpart):
                        return self._error(ErrorKind.INVALID_STRING,
                                           f"invalid unicode escape {text[i:i + 6]!r}", i)
                    i += 6
                    continue
                if esc not in _SIMPLE_ESCAPES:
                    return self._error(ErrorKind.INVALID_STRING, f"invalid escape {text[i:i + 2]!r}", i)
                i += 2
                continue
            if ch < " ":
                return self._error(ErrorKind.INVALID_STRING,
                                   f"unescaped control character U+{ord(ch):04X} in string", i)
            if _is_surrogate(ch):
                return self._error(ErrorKind.INVALID_ENCODING,
                                   f"lone surrogate U+{ord(ch):04X} in source text", i)
            i += 1
        return self._error(ErrorKind.INVALID_STRING, "unterminated string", start)

    def _scan_number(self, start: int) -> Token:
        m = _NUMBER_RUN_RE.match(self.text, start)
        lexeme = m.group()
        if _NUMBER_RE.fullmatch(lexeme) is None:
            raise self._error(ErrorKind.INVALID_NUMBER, f"invalid number {lexeme!r}", start)
        self._pos = m.end()
        return Token(TokenKind.NUMBER, lexeme, start)

    def _scan_keyword(self, start: int, word: str, kind: TokenKind) -> Token:
        """
        Match ``word`` as a whole token.

        Only an identifier character (letter, digit or ``_``) directly after
        the word makes it a different word, so ``truex`` fails here with
        UnexpectedCharacter. Any other character ends the literal and is
        lexed as the next token: ``[true@]`` fails on the ``@`` with
        UnexpectedCharacter, while ``true@`` at the root has already been
        accepted and the ``@`` is TrailingData.
        """
        text = self.text
        n = len(text)
        i = start
        for expected in word:
            if i >= n:
                raise self._error(ErrorKind.UNEXPECTED_CHARACTER,
                                  f"truncated literal {text[start:i]!r}, expected {word!r}", i)
            if text[i] != expected:
                raise self._unexpected(i, f" in literal, expected {word!r}")
            i += 1
        if i < n and (text[i].isalnum() or text[i] == "_"):
            raise self._unexpected(i, f" after literal {word!r}")
        self._pos = i
        return Token(kind, word, start)

    # -----------------------------------------------------------------------
    # ERROR HELPERS
    # -----------------------------------------------------------------------
    def _error(self, kind: ErrorKind, message: str, offset: int) -> LexError:
        return LexError(kind, message, Position.locate(self.text, offset))

    def _unexpected(self, offset: int, context: str = "") -> LexError:
        ch = self.text[offset]
        if _is_surrogate(ch):
            return self._error(ErrorKind.INVALID_ENCODING,
                               f"lone surrogate U+{ord(ch):04X} in source text", offset)
        return self._error(ErrorKind.UNEXPECTED_CHARACTER, f"unexpected character {ch!r}{context}", offset)

# ---------------------------------------------------------------------------
# LOOKAHEAD CURSOR
# ---------------------------------------------------------------------------
class LookAhead:
    """
    One-slot pushback cursor over a Tokenizer.

    peek() exposes the next token without consuming it; advance() consumes
    it. The validator never needs more than one token of lookahead.
    """
    def __init__(self, tokenizer: Tokenizer):
        self._tokenizer = tokenizer
        self._buf: List[Token] = []

    @property
    def tokenizer(self) -> Tokenizer:
        return self._tokenizer

    def advance(self) -> Token:
        if self._buf:
            return self._buf.pop()
        return self._tokenizer.next_token()

    def peek(self) -> Token:
        if not self._buf:
            self._buf.append(self._tokenizer.next_token())
        return self._buf[-1]


def tokenize(source: Union[str, bytes, bytearray]) -> Iterator[Token]:
    """Generator over every token of ``source``, ending with END."""
    return iter(Tokenizer(source))
