# src/sh61_shell/core/errors.py
from typing import Optional


class ShellParseError(Exception):
    """Base class for errors raised while planning a command line."""


class ShellSyntaxError(ShellParseError):
    """
    A structurally malformed command line, such as a redirection without a
    target or an operator with no command before it.

    `token` is the offending token text (``newline`` at end of input) and
    `position` its offset in the command line.
    """

    def __init__(self, token: str, position: int, message: Optional[str] = None):
        self.token = token
        self.position = position
        self.message = message or f"syntax error near unexpected token `{token}'"
        super().__init__(self.message)
