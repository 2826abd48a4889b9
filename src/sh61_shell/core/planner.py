# src/sh61_shell/core/planner.py
from __future__ import annotations

import logging
from typing import Iterator, Optional, Tuple

from sh61_shell.core.errors import ShellSyntaxError
from sh61_shell.core.managers.config_manager import config_manager
from sh61_shell.core.parser import (
    DELIMITERS,
    CommandLineParser,
    CommandParser,
    ConditionalParser,
    PipelineParser,
    ShellParser,
    find_terminator,
)
from sh61_shell.core.tokenizer import REDIRECT_PATTERN, Token, TokenType, scan_token
from sh61_shell.model import (
    Command,
    CommandLinePlan,
    Conditional,
    ConditionalLink,
    Joiner,
    Pipeline,
    PipelineLink,
    RedirectDirection,
    Redirection,
    Terminator,
)

logger = logging.getLogger(__name__)

# Operators that need a unit on their right-hand side.
_NEEDS_OPERAND = frozenset({TokenType.AND, TokenType.OR, TokenType.PIPE})

_JOINERS = {TokenType.AND: Joiner.AND, TokenType.OR: Joiner.OR}
_TERMINATORS = {TokenType.SEQUENCE: Terminator.SEQUENCE, TokenType.BACKGROUND: Terminator.BACKGROUND}


def _unexpected(token: Optional[Token], position: int) -> ShellSyntaxError:
    if token is None or token.type == TokenType.EOL:
        return ShellSyntaxError("newline", token.start if token is not None else position)
    return ShellSyntaxError(token.raw, token.start)


def _units(view: ShellParser, bound: int) -> Iterator[Tuple[ShellParser, Optional[Token]]]:
    """
    Yields every non-empty sibling unit starting at `view`, paired with the
    operator token that follows it. `bound` is the stop of the enclosing
    region; the operator is None when the unit reaches it.

    Raises ShellSyntaxError for an operator with no unit before it, for a
    trailing `&&`, `||` or `|`, and for operators that do not belong to
    this level.
    """
    prev_op: Optional[TokenType] = None
    while True:
        op = scan_token(view.buffer, view.stop, bound, view.extended)
        if view.empty():
            if op is not None:
                raise _unexpected(op, view.stop)
            if prev_op in _NEEDS_OPERAND:
                # Report whatever follows in the whole line.
                raise _unexpected(scan_token(view.buffer, view.stop, view.end, view.extended), view.stop)
            return

        yield view, op
        if op is None:
            return
        if op.type not in DELIMITERS[view.level]:
            raise _unexpected(op, op.start)
        prev_op = op.type
        view = view.advance()


def _make_redirection(op: Token, target: Token) -> Redirection:
    m = REDIRECT_PATTERN.fullmatch(op.raw)
    digits, symbol = m.group(1), m.group(2)
    fd = int(digits) if digits else None
    if symbol == "<":
        direction = RedirectDirection.INPUT
    elif symbol == ">>":
        direction = RedirectDirection.APPEND
    elif fd == 2:
        direction = RedirectDirection.ERROR
    else:
        direction = RedirectDirection.OUTPUT
    return Redirection(op=op.raw, direction=direction, fd=fd, target=target.str())


def parse_command(view: CommandParser) -> Command:
    """
    Collects the argument words and redirections of one command.

    A redirection operator consumes the following word as its target. With
    extended syntax, a command may instead be a parenthesised group,
    optionally followed by redirections.
    """
    buffer, stop, extended = view.buffer, view.stop, view.extended
    command = Command(text=view.str().strip())
    pos = view.start

    while True:
        tok = scan_token(buffer, pos, stop, extended)
        if tok is None:
            break
        pos = tok.stop

        if tok.type == TokenType.NORMAL:
            if command.subshell is not None:
                raise _unexpected(tok, tok.start)
            command.args.append(tok.str())

        elif tok.type == TokenType.REDIRECT_OP:
            target = scan_token(buffer, pos, stop, extended)
            if target is None:
                # Nothing left in the command; report whatever ends it.
                raise _unexpected(scan_token(buffer, stop, view.end, extended), stop)
            if target.type != TokenType.NORMAL:
                raise _unexpected(target, target.start)
            command.redirections.append(_make_redirection(tok, target))
            pos = target.stop

        elif tok.type == TokenType.LPAREN and not command.args and not command.redirections \
                and command.subshell is None:
            close_start, close_type, close_stop = find_terminator(
                buffer, tok.stop, stop, frozenset({TokenType.RPAREN}), extended
            )
            if close_type is None:
                raise ShellSyntaxError("(", tok.start, "syntax error: unmatched `('")
            body = _plan_region(buffer, tok.stop, view.end, extended, stop=close_start)
            if body.is_empty():
                raise ShellSyntaxError(")", close_start)
            command.subshell = body
            pos = close_stop

        else:
            raise _unexpected(tok, tok.start)

    return command


def _plan_pipeline(view: PipelineParser) -> Pipeline:
    pipeline = Pipeline(text=view.str().strip())
    for command_view, _ in _units(view.command_begin(), view.stop):
        pipeline.commands.append(parse_command(command_view))
    return pipeline


def _plan_conditional(view: ConditionalParser) -> Conditional:
    conditional = Conditional(text=view.str().strip())
    op: Optional[Joiner] = None
    for pipeline_view, next_op in _units(view.pipeline_begin(), view.stop):
        conditional.links.append(PipelineLink(op=op, pipeline=_plan_pipeline(pipeline_view)))
        op = _JOINERS.get(next_op.type) if next_op is not None else None
    return conditional


def _plan_region(buffer: str, first: int, last: int, extended: bool,
                 stop: Optional[int] = None) -> CommandLinePlan:
    plan = CommandLinePlan()
    line = CommandLineParser(buffer, first, last, stop=stop, extended=extended)
    for conditional_view, next_op in _units(line.conditional_begin(), line.stop):
        terminator = _TERMINATORS.get(next_op.type, Terminator.EOL) if next_op is not None else Terminator.EOL
        plan.conditionals.append(
            ConditionalLink(conditional=_plan_conditional(conditional_view), terminator=terminator)
        )
    return plan


def extended_syntax_enabled() -> bool:
    """Whether `(` and `)` are treated as grouping operators."""
    return bool(config_manager.get_nested("parser.extended_syntax", True))


def build_plan(buffer: str, first: int = 0, last: Optional[int] = None, *,
               extended: Optional[bool] = None) -> CommandLinePlan:
    """
    Builds the execution plan for ``buffer[first:last]``.

    `extended` defaults to the 'parser.extended_syntax' setting.

    Raises:
        ShellSyntaxError: if the command line is structurally malformed.
    """
    end = len(buffer) if last is None else last
    if extended is None:
        extended = extended_syntax_enabled()
    plan = _plan_region(buffer, first, end, extended)
    logger.debug("Planned %d conditional(s) from %r", len(plan.conditionals), buffer[first:end])
    return plan
