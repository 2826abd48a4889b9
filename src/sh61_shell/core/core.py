# src/sh61_shell/core/core.py
from __future__ import annotations

import logging
from typing import Optional

from sh61_shell.core.errors import ShellSyntaxError
from sh61_shell.core.planner import build_plan, extended_syntax_enabled, parse_command
from sh61_shell.model import ParseResult, SyntaxErrorInfo

logger = logging.getLogger(__name__)


def parse_command_line(line: str, extended: Optional[bool] = None) -> ParseResult:
    """
    Parses one command line into a ParseResult.

    Never raises on malformed input: syntax errors are reported through
    `ParseResult.error` so the caller decides how to present them.

    Args:
        line (str): The raw command line.
        extended (Optional[bool]): Override for parenthesised groups;
            defaults to the 'parser.extended_syntax' setting.

    Returns:
        ParseResult: The plan, or the syntax error that prevented it.
    """
    line = line or ""

    try:
        plan = build_plan(line, extended=extended)
    except ShellSyntaxError as e:
        logger.info("Syntax error at offset %d in %r: %s", e.position, line, e.message)
        return ParseResult(
            line=line,
            error=SyntaxErrorInfo(message=e.message, token=e.token, position=e.position),
        )
    return ParseResult(line=line, plan=plan)


__all__ = ["build_plan", "parse_command", "parse_command_line", "extended_syntax_enabled"]
