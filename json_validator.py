# json_validator.py
# Recursive-descent JSON validator and command-line front end
#
# =============================================================================
#  VALIDATOR IMPLEMENTATION: RECURSIVE DESCENT, NO VALUE TREE
# =============================================================================
#
# One function per grammar rule:
#
#   value  := object | array | string | number | true | false | null
#   object := '{' ( member ( ',' member )* )? '}'
#   member := string ':' value
#   array  := '[' ( value ( ',' value )* )? ']'
#
# Tokens are pulled from a LookAhead cursor one at a time, so memory is
# proportional to nesting depth, not to input size. Nothing is built: each
# rule either returns normally or raises the first ValidationError.
#
# Depth is bounded by an explicit counter (ValidatorOptions.max_depth). If the
# interpreter's own recursion limit is reached first, because the configured
# limit was set very high, the RecursionError is reported as TooDeep as well.
#
# After the root value, anything except END is TrailingData. A lexical error
# in that trailing region is reported as TrailingData too, since the document
# itself has already been accepted.
# =============================================================================

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Set, Union

from json_errors import ErrorKind, LexError, Position, ValidationError
from json_tokenizer import LookAhead, Token, TokenKind, Tokenizer

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
DEPTH_LIMIT_DEFAULT = 256        # Two Python frames per level - stays well inside the default recursion limit

EXIT_OK       = 0
EXIT_INVALID  = 1
EXIT_IO_ERROR = 2

_SCALARS = frozenset({
    TokenKind.STRING, TokenKind.NUMBER,
    TokenKind.TRUE, TokenKind.FALSE, TokenKind.NULL,
})

logger = logging.getLogger("json_validator")

# ---------------------------------------------------------------------------
# OPTIONS AND VERDICTS
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ValidatorOptions:
    """
    Per-run policy. Defaults give exact RFC 8259 validity.

    max_depth              - deepest allowed container nesting; 0 admits only scalars
    reject_duplicate_keys  - fail with DuplicateKey on a repeated name within one object
    require_container      - root must be an object or array (RFC 4627 rule)
    """
    max_depth: int = DEPTH_LIMIT_DEFAULT
    reject_duplicate_keys: bool = False
    require_container: bool = False

    def __post_init__(self):
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")


class Valid(NamedTuple):
    """Verdict for input that derives fully from the value rule."""

    @property
    def is_valid(self) -> bool:
        return True


class Invalid(NamedTuple):
    """Verdict carrying the first error of the run."""
    error: ValidationError

    @property
    def is_valid(self) -> bool:
        return False


Verdict = Union[Valid, Invalid]
VALID = Valid()

# ---------------------------------------------------------------------------
# PARSER UTILITY
# ---------------------------------------------------------------------------
def _error(tokens: LookAhead, kind: ErrorKind, message: str, token: Token,
           expected: Optional[str] = None) -> ValidationError:
    position = Position.locate(tokens.tokenizer.text, token.offset)
    return ValidationError(kind, message, position, expected=expected, found=token.describe())


def _expected(tokens: LookAhead, expected: str, token: Token) -> ValidationError:
    """Mismatch against ``expected``; running out of input is always UnexpectedEof."""
    if token.kind is TokenKind.END:
        return _error(tokens, ErrorKind.UNEXPECTED_EOF,
                      f"unexpected end of input, expected {expected}", token, expected)
    return _error(tokens, ErrorKind.EXPECTED_TOKEN,
                  f"expected {expected}, found {token.describe()}", token, expected)


def _enter(tokens: LookAhead, token: Token, depth: int, options: ValidatorOptions) -> None:
    if depth > options.max_depth:
        raise _error(tokens, ErrorKind.TOO_DEEP,
                     f"nesting depth exceeds limit of {options.max_depth}", token)

# ---------------------------------------------------------------------------
# CORE VALUE RULE
# ---------------------------------------------------------------------------
def _parse_value(tokens: LookAhead, depth: int, options: ValidatorOptions) -> None:
    token = tokens.advance()
    kind = token.kind
    if kind in _SCALARS:
        return
    if kind is TokenKind.OBJECT_OPEN:
        _enter(tokens, token, depth + 1, options)
        _parse_object(tokens, depth + 1, options)
        return
    if kind is TokenKind.ARRAY_OPEN:
        _enter(tokens, token, depth + 1, options)
        _parse_array(tokens, depth + 1, options)
        return
    raise _expected(tokens, "value", token)

# ---------------------------------------------------------------------------
# ARRAY RULE
# ---------------------------------------------------------------------------
def _parse_array(tokens: LookAhead, depth: int, options: ValidatorOptions) -> None:
    if tokens.peek().kind is TokenKind.ARRAY_CLOSE:
        tokens.advance()
        return

    while True:
        _parse_value(tokens, depth, options)
        token = tokens.advance()
        if token.kind is TokenKind.ARRAY_CLOSE:
            return
        if token.kind is not TokenKind.COMMA:
            raise _expected(tokens, "',' or ']'", token)
        closer = tokens.peek()
        if closer.kind is TokenKind.ARRAY_CLOSE:
            raise _error(tokens, ErrorKind.UNEXPECTED_TOKEN, "trailing comma before ']'", closer)

# ---------------------------------------------------------------------------
# OBJECT RULE
# ---------------------------------------------------------------------------
def _parse_object(tokens: LookAhead, depth: int, options: ValidatorOptions) -> None:
    """
    Validate members up to the closing brace.

    Keys are tracked only when duplicate rejection is on; otherwise the
    object costs no memory beyond the current token.
    """
    seen: Optional[Set[str]] = set() if options.reject_duplicate_keys else None
    token = tokens.advance()
    if token.kind is TokenKind.OBJECT_CLOSE:
        return

    while True:
        if token.kind is not TokenKind.STRING:
            if token.kind is TokenKind.END:
                raise _expected(tokens, "string key", token)
            raise _error(tokens, ErrorKind.EXPECTED_STRING,
                         f"object key must be a string, found {token.describe()}", token, "string key")
        if seen is not None:
            if token.value in seen:
                raise _error(tokens, ErrorKind.DUPLICATE_KEY, f"duplicate key {token.value!r}", token)
            seen.add(token.value)

        colon = tokens.advance()
        if colon.kind is not TokenKind.COLON:
            raise _expected(tokens, "':'", colon)
        _parse_value(tokens, depth, options)

        token = tokens.advance()
        if token.kind is TokenKind.OBJECT_CLOSE:
            return
        if token.kind is not TokenKind.COMMA:
            raise _expected(tokens, "',' or '}'", token)
        token = tokens.advance()
        if token.kind is TokenKind.OBJECT_CLOSE:
            raise _error(tokens, ErrorKind.UNEXPECTED_TOKEN, "trailing comma before '}'", token)

# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def check(source: Union[str, bytes, bytearray], options: Optional[ValidatorOptions] = None) -> None:
    """
    Validate ``source`` and raise the first ValidationError found.

    ``source`` is text, or raw bytes that are decoded here as strict UTF-8.
    Exactly one value must be present, followed only by whitespace.
    """
    options = options or ValidatorOptions()
    tokenizer = Tokenizer(source)
    tokens = LookAhead(tokenizer)

    if options.require_container:
        first = tokens.peek()
        if first.kind not in (TokenKind.OBJECT_OPEN, TokenKind.ARRAY_OPEN, TokenKind.END):
            raise _error(tokens, ErrorKind.UNEXPECTED_TOKEN,
                         f"root value must be an object or array, found {first.describe()}",
                         first, "object or array")

    try:
        _parse_value(tokens, 0, options)
    except RecursionError:
        raise ValidationError(
            ErrorKind.TOO_DEEP, "nesting depth exceeds interpreter recursion limit",
            Position.locate(tokenizer.text, tokenizer.offset),
        ) from None

    try:
        trailing = tokens.peek()
    except LexError as exc:
        if exc.kind is ErrorKind.INVALID_ENCODING:
            raise
        raise ValidationError(ErrorKind.TRAILING_DATA, "extra data after root value",
                              exc.position) from exc
    if trailing.kind is not TokenKind.END:
        raise _error(tokens, ErrorKind.TRAILING_DATA,
                     f"extra data after root value: {trailing.describe()}", trailing)


def validate(source: Union[str, bytes, bytearray], options: Optional[ValidatorOptions] = None) -> Verdict:
    """Error-as-value form of check(): returns VALID or Invalid(error)."""
    try:
        check(source, options)
    except ValidationError as exc:
        return Invalid(exc)
    return VALID

# ---------------------------------------------------------------------------
# CLI HELPERS
# ---------------------------------------------------------------------------
def _read_source(path: str) -> bytes:
    if path == "-":
        return sys.stdin.buffer.read()
    with open(path, "rb") as fh:
        return fh.read()


def format_diagnostic(path: str, error: ValidationError) -> str:
    pos = error.position
    return f"{path}:{pos.line}:{pos.column}: {error.kind}: {error.message}"


def _dump_tokens(path: str, data: bytes) -> bool:
    """Print the token stream of ``data``; False if it stops on a lexical error."""
    try:
        for token in Tokenizer(data):
            print(f"{token.offset}\t{token.kind.name}\t{token.value!r}")
    except LexError as exc:
        print(format_diagnostic(path, exc), file=sys.stderr)
        return False
    return True

# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
def _cli(argv: List[str]) -> int:
    """
    Command-line interface for validation runs.

    Exit status: 0 when every file is valid, 1 when any file is invalid,
    2 when any file cannot be read (2 wins over 1).
    """
    ap = argparse.ArgumentParser(prog="json-validate", description="Strict RFC 8259 JSON validator")
    ap.add_argument("files", nargs="+", metavar="file", help="JSON file to verify, '-' reads stdin")
    ap.add_argument("--debug", action="store_true", help="dump token stream instead of validating")
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT,
                    help=f"maximum container nesting (default {DEPTH_LIMIT_DEFAULT})")
    ap.add_argument("--reject-duplicate-keys", action="store_true",
                    help="treat repeated names within an object as an error")
    ap.add_argument("--require-container", action="store_true",
                    help="require an object or array at the root")
    noise = ap.add_mutually_exclusive_group()
    noise.add_argument("-q", "--quiet", action="store_true", help="report through exit status only")
    noise.add_argument("-v", "--verbose", action="store_true", help="log every file checked")
    args = ap.parse_args(argv)

    if args.max_depth < 0:
        ap.error("--max-depth must be non-negative")

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s: %(message)s")
    options = ValidatorOptions(
        max_depth=args.max_depth,
        reject_duplicate_keys=args.reject_duplicate_keys,
        require_container=args.require_container,
    )

    status = EXIT_OK
    for path in args.files:
        try:
            data = _read_source(path)
        except OSError as exc:
            if not args.quiet:
                print(f"{path}: cannot read file: {exc.strerror or exc}", file=sys.stderr)
            status = EXIT_IO_ERROR
            continue
        logger.debug("%s: read %d bytes", path, len(data))

        if args.debug:
            if not _dump_tokens(path, data):
                status = max(status, EXIT_INVALID)
            continue

        verdict = validate(data, options)
        if verdict.is_valid:
            logger.info("%s: OK", path)
            continue
        if not args.quiet:
            print(format_diagnostic(path, verdict.error), file=sys.stderr)
        status = max(status, EXIT_INVALID)
    return status


def main() -> int:
    return _cli(sys.argv[1:])

# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(main())
