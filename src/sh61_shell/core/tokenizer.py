# src/sh61_shell/core/tokenizer.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, Optional


class TokenType(IntEnum):
    """Token classes produced by the shell tokenizer."""
    OTHER = -1
    NORMAL = 0       # command word
    REDIRECT_OP = 1  # `<`, `>`, `>>`, optionally fd-qualified (`2>`)
    # Every type below terminates the current command.
    SEQUENCE = 2     # `;`
    EOL = 3          # newline or end of the command line
    BACKGROUND = 4   # `&`
    PIPE = 5         # `|`
    AND = 6          # `&&`
    OR = 7           # `||`
    LPAREN = 8       # `(` (extended syntax)
    RPAREN = 9       # `)` (extended syntax)


CONTROL_TYPES = frozenset({
    TokenType.SEQUENCE, TokenType.EOL, TokenType.BACKGROUND,
    TokenType.PIPE, TokenType.AND, TokenType.OR, TokenType.RPAREN,
})

_TYPE_NAMES = {
    TokenType.OTHER: "other",
    TokenType.NORMAL: "normal",
    TokenType.REDIRECT_OP: "redirection",
    TokenType.SEQUENCE: "sequence",
    TokenType.EOL: "end of line",
    TokenType.BACKGROUND: "background",
    TokenType.PIPE: "pipe",
    TokenType.AND: "and",
    TokenType.OR: "or",
    TokenType.LPAREN: "left paren",
    TokenType.RPAREN: "right paren",
}

# Longest match first: `&&` before `&`, `||` before `|`, `>>` before `>`.
_CONTROL_OPS = (
    ("&&", TokenType.AND),
    ("||", TokenType.OR),
    ("&", TokenType.BACKGROUND),
    ("|", TokenType.PIPE),
    (";", TokenType.SEQUENCE),
    ("\n", TokenType.EOL),
)
_PAREN_OPS = {"(": TokenType.LPAREN, ")": TokenType.RPAREN}

REDIRECT_PATTERN = re.compile(r"(\d*)(>>|>|<)")

# Characters that end an unquoted word.
_OPERATOR_CHARS = frozenset(";&|<>()\n")
_BLANKS = " \t\r\f\v"


def type_name(token_type: int) -> str:
    """Returns a human-readable name for a token type, for diagnostics."""
    try:
        return _TYPE_NAMES[TokenType(token_type)]
    except ValueError:
        return "unknown"


@dataclass(frozen=True)
class Token:
    """A classified slice ``buffer[start:stop]`` of a command line."""
    buffer: str = field(repr=False)
    start: int
    stop: int
    type: TokenType
    quoted: bool = False

    @property
    def raw(self) -> str:
        """The literal text of the token, quotes included."""
        return self.buffer[self.start:self.stop]

    def str(self) -> str:
        """
        Returns the token text with quote delimiters removed.

        Backslash escapes are kept verbatim; no unescaping is performed.
        """
        if not self.quoted:
            return self.raw
        out = []
        quote: Optional[str] = None
        i, stop = self.start, self.stop
        while i < stop:
            ch = self.buffer[i]
            if quote is None and ch in "'\"":
                quote = ch
            elif ch == quote:
                quote = None
            elif ch == "\\" and quote != "'" and i + 1 < stop:
                out.append(self.buffer[i:i + 2])
                i += 1
            else:
                out.append(ch)
            i += 1
        return "".join(out)

    def type_name(self) -> str:
        return type_name(self.type)


def _scan_word(buffer: str, pos: int, end: int) -> tuple[int, bool]:
    """Scans a word starting at `pos`, splicing quoted fragments. Returns (stop, quoted)."""
    quoted = False
    quote: Optional[str] = None
    while pos < end:
        ch = buffer[pos]
        if quote is not None:
            if ch == quote:
                quote = None
            elif ch == "\\" and quote == '"' and pos + 1 < end:
                pos += 1
        elif ch in "'\"":
            quote = ch
            quoted = True
        elif ch == "\\" and pos + 1 < end:
            pos += 1
        elif ch in _BLANKS or ch in _OPERATOR_CHARS:
            break
        pos += 1
    return pos, quoted


def scan_token(buffer: str, pos: int, end: int, extended: bool = True) -> Optional[Token]:
    """
    Classifies the token starting at or after `pos`.

    Returns None when only whitespace remains before `end`. Never raises:
    unterminated quotes run to `end` and unsupported operator characters
    become single-character OTHER tokens.
    """
    while pos < end and buffer[pos] in _BLANKS:
        pos += 1
    if pos >= end:
        return None

    ch = buffer[pos]

    if ch.isdigit() or ch in "<>":
        m = REDIRECT_PATTERN.match(buffer, pos, end)
        if m:
            return Token(buffer, pos, m.end(), TokenType.REDIRECT_OP)

    if ch in _OPERATOR_CHARS:
        for text, token_type in _CONTROL_OPS:
            if buffer.startswith(text, pos, end):
                return Token(buffer, pos, pos + len(text), token_type)
        if extended and ch in _PAREN_OPS:
            return Token(buffer, pos, pos + 1, _PAREN_OPS[ch])
        return Token(buffer, pos, pos + 1, TokenType.OTHER)

    stop, quoted = _scan_word(buffer, pos, end)
    return Token(buffer, pos, stop, TokenType.NORMAL, quoted)


class ShellTokenizer:
    """
    An immutable cursor over the tokens of ``buffer[first:last]``.

    The cursor sits on one token at a time; `advance()` returns a new
    cursor positioned on the following token. The buffer is borrowed and
    never copied.

    Example:
        >>> [t.str() for t in ShellTokenizer("echo 'a b' | wc")]
        ['echo', 'a b', '|', 'wc']
    """

    __slots__ = ("_buffer", "_s", "_end", "_extended", "_token")

    def __init__(self, buffer: str, first: int = 0, last: Optional[int] = None, *, extended: bool = True):
        end = len(buffer) if last is None else last
        self._buffer = buffer
        self._end = end
        self._extended = extended
        self._token = scan_token(buffer, first, end, extended)
        self._s = self._token.start if self._token is not None else end

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def start(self) -> int:
        return self._s

    @property
    def end(self) -> int:
        return self._end

    @property
    def token(self) -> Optional[Token]:
        return self._token

    def empty(self) -> bool:
        return self._token is None

    def __bool__(self) -> bool:
        return self._token is not None

    def type(self) -> TokenType:
        """Returns the current token's type; EOL once the range is exhausted."""
        return self._token.type if self._token is not None else TokenType.EOL

    def type_name(self) -> str:
        return type_name(self.type())

    def quoted(self) -> bool:
        return self._token is not None and self._token.quoted

    def str(self) -> str:
        return self._token.str() if self._token is not None else ""

    def advance(self) -> "ShellTokenizer":
        if self._token is None:
            return self
        return ShellTokenizer(self._buffer, self._token.stop, self._end, extended=self._extended)

    def __iter__(self) -> Iterator[Token]:
        pos = self._s
        while True:
            token = scan_token(self._buffer, pos, self._end, self._extended)
            if token is None:
                return
            yield token
            pos = token.stop

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ShellTokenizer):
            return self._s == other._s and self._end == other._end
        stop = getattr(other, "stop", None)
        if stop is not None and hasattr(other, "start"):
            return self._s == other.start and self._end == stop
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self._s, self._end))

    def __repr__(self) -> str:
        return f"<ShellTokenizer {self.type_name()} {self.str()!r} at {self._s}>"


def tokenize(line: str, extended: bool = True) -> list[Token]:
    """Returns every token of `line` as a list."""
    return list(ShellTokenizer(line, extended=extended))
