# src/sh61_shell/core/parser.py
from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Iterator, Optional, Tuple

from sh61_shell.core.tokenizer import ShellTokenizer, TokenType, scan_token, type_name


class ParseLevel(Enum):
    """Grammar levels, from the whole command line down to a single command."""
    COMMAND_LINE = "command_line"
    CONDITIONAL = "conditional"
    PIPELINE = "pipeline"
    COMMAND = "command"


# Operators that separate sibling units at each level.
DELIMITERS: dict[ParseLevel, FrozenSet[TokenType]] = {
    ParseLevel.COMMAND_LINE: frozenset(),
    ParseLevel.CONDITIONAL: frozenset({TokenType.SEQUENCE, TokenType.BACKGROUND, TokenType.EOL}),
    ParseLevel.PIPELINE: frozenset({TokenType.AND, TokenType.OR}),
    ParseLevel.COMMAND: frozenset({TokenType.PIPE}),
}

# Operators that end a unit: its own delimiters plus everything of weaker precedence.
TERMINATORS: dict[ParseLevel, FrozenSet[TokenType]] = {
    ParseLevel.COMMAND_LINE: frozenset({TokenType.RPAREN}),
}
TERMINATORS[ParseLevel.CONDITIONAL] = TERMINATORS[ParseLevel.COMMAND_LINE] | DELIMITERS[ParseLevel.CONDITIONAL]
TERMINATORS[ParseLevel.PIPELINE] = TERMINATORS[ParseLevel.CONDITIONAL] | DELIMITERS[ParseLevel.PIPELINE]
TERMINATORS[ParseLevel.COMMAND] = TERMINATORS[ParseLevel.PIPELINE] | DELIMITERS[ParseLevel.COMMAND]


def find_terminator(
        buffer: str, pos: int, end: int, stops: FrozenSet[TokenType], extended: bool = True
) -> Tuple[int, Optional[TokenType], int]:
    """
    Scans ``buffer[pos:end]`` for the first operator in `stops` outside parentheses.

    Returns ``(op_start, op_type, op_stop)``; when no such operator exists
    the result is ``(end, None, end)``. Parenthesised groups are skipped as
    a whole, and an unbalanced ``(`` swallows the rest of the range.
    """
    depth = 0
    while True:
        token = scan_token(buffer, pos, end, extended)
        if token is None:
            return end, None, end
        if token.type == TokenType.LPAREN:
            depth += 1
        elif token.type == TokenType.RPAREN and depth > 0:
            depth -= 1
        elif depth == 0 and token.type in stops:
            return token.start, token.type, token.stop
        pos = token.stop


def _skip_blanks(buffer: str, pos: int, end: int, extended: bool, skip_eol: bool = False) -> int:
    while True:
        token = scan_token(buffer, pos, end, extended)
        if token is None:
            return end
        if not (skip_eol and token.type == TokenType.EOL):
            return token.start
        pos = token.stop


class ShellParser:
    """
    A view of one region ``buffer[start:stop]`` of a command line.

    `end` is the right boundary of the whole command line; every view
    derived from a line shares it, and it never moves while a view
    advances through its siblings. Views are immutable;
    `advance()` on the level-specific subclasses returns a new view.
    Two views are equal when their start and stop coincide.
    """

    level = ParseLevel.COMMAND_LINE

    __slots__ = ("_buffer", "_s", "_stop", "_end", "_extended")

    def __init__(self, buffer: str, first: int = 0, last: Optional[int] = None, *,
                 stop: Optional[int] = None, extended: bool = True):
        end = len(buffer) if last is None else last
        self._buffer = buffer
        self._s = first
        self._stop = end if stop is None else stop
        self._end = end
        self._extended = extended

    @classmethod
    def _make(cls, buffer: str, start: int, stop: int, end: int, extended: bool):
        return cls(buffer, start, end, stop=stop, extended=extended)

    @classmethod
    def first_delimited(cls, buffer: str, first: int, last: int, extended: bool = True):
        """
        Returns a `cls` view over the first unit starting at `first`.

        Leading newlines are skipped at levels where they separate units,
        so blank lines never produce an empty view.
        """
        start = _skip_blanks(buffer, first, last, extended, TokenType.EOL in DELIMITERS[cls.level])
        stop, _, _ = find_terminator(buffer, start, last, TERMINATORS[cls.level], extended)
        return cls._make(buffer, start, stop, last, extended)

    # --- region accessors ---

    @property
    def buffer(self) -> str:
        return self._buffer

    @property
    def start(self) -> int:
        return self._s

    @property
    def stop(self) -> int:
        return self._stop

    @property
    def end(self) -> int:
        return self._end

    @property
    def extended(self) -> bool:
        return self._extended

    def empty(self) -> bool:
        return self._s == self._stop

    def __bool__(self) -> bool:
        return self._s != self._stop

    def str(self) -> str:
        """Returns the region's text, for debugging."""
        return self._buffer[self._s:self._stop]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ShellParser):
            return self._s == other._s and self._stop == other._stop
        if isinstance(other, ShellTokenizer):
            return self._s == other.start and self._stop == other.end
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self._s, self._stop))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} [{self._s}:{self._stop}] {self.str()!r}>"

    # --- lookahead ---

    def next_op(self) -> TokenType:
        """Returns the operator type right after the region, or EOL at the end of the line."""
        token = scan_token(self._buffer, self._stop, self._end, self._extended)
        return token.type if token is not None else TokenType.EOL

    def next_op_name(self) -> str:
        return type_name(self.next_op())

    def token_begin(self) -> ShellTokenizer:
        return ShellTokenizer(self._buffer, self._s, self._stop, extended=self._extended)

    def token_end(self) -> ShellTokenizer:
        return ShellTokenizer(self._buffer, self._stop, self._stop, extended=self._extended)

    def end_region(self):
        """Returns the empty view at this region's stop, which exhausted views compare equal to."""
        return self._make(self._buffer, self._stop, self._stop, self._end, self._extended)

    # --- navigation ---

    def _next_delimited(self):
        if self.empty():
            return self
        token = scan_token(self._buffer, self._stop, self._end, self._extended)
        if token is None or token.type not in DELIMITERS[self.level]:
            # End of line, or an operator owned by an enclosing level.
            return self.end_region()
        return self.first_delimited(self._buffer, token.stop, self._end, self._extended)

    def _siblings(self) -> Iterator["ShellParser"]:
        view = self
        while view:
            yield view
            view = view._next_delimited()


class CommandParser(ShellParser):
    """A view of one command; `advance()` moves across `|`."""

    level = ParseLevel.COMMAND
    __slots__ = ()

    def advance(self) -> "CommandParser":
        return self._next_delimited()

    def __iter__(self) -> Iterator["CommandParser"]:
        return self._siblings()


class PipelineParser(ShellParser):
    """A view of one pipeline; `advance()` moves across `&&` and `||`."""

    level = ParseLevel.PIPELINE
    __slots__ = ()

    def command_begin(self) -> CommandParser:
        return CommandParser.first_delimited(self._buffer, self._s, self._end, self._extended)

    def advance(self) -> "PipelineParser":
        return self._next_delimited()

    def __iter__(self) -> Iterator["PipelineParser"]:
        return self._siblings()


class ConditionalParser(ShellParser):
    """A view of one conditional; `advance()` moves across `;`, `&` and newlines."""

    level = ParseLevel.CONDITIONAL
    __slots__ = ()

    def pipeline_begin(self) -> PipelineParser:
        return PipelineParser.first_delimited(self._buffer, self._s, self._end, self._extended)

    def command_begin(self) -> CommandParser:
        return CommandParser.first_delimited(self._buffer, self._s, self._end, self._extended)

    def advance(self) -> "ConditionalParser":
        return self._next_delimited()

    def __iter__(self) -> Iterator["ConditionalParser"]:
        return self._siblings()


class CommandLineParser(ShellParser):
    """
    Entry point: a view of a whole command line.

    Example:
        >>> line = CommandLineParser("a ; b && c")
        >>> [c.str() for c in line.conditional_begin()]
        ['a ', 'b && c']
    """

    level = ParseLevel.COMMAND_LINE
    __slots__ = ()

    def conditional_begin(self) -> ConditionalParser:
        return ConditionalParser.first_delimited(self._buffer, self._s, self._end, self._extended)

    def pipeline_begin(self) -> PipelineParser:
        return PipelineParser.first_delimited(self._buffer, self._s, self._end, self._extended)

    def command_begin(self) -> CommandParser:
        return CommandParser.first_delimited(self._buffer, self._s, self._end, self._extended)
