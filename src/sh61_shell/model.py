# src/sh61_shell/model.py
from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class RedirectDirection(str, Enum):
    INPUT = "input"
    OUTPUT = "output"
    APPEND = "append"
    ERROR = "error"


class Joiner(str, Enum):
    """Operator joining a pipeline to the one before it."""
    AND = "&&"
    OR = "||"


class Terminator(str, Enum):
    """Operator ending a conditional: wait for it, detach it, or end of line."""
    SEQUENCE = ";"
    BACKGROUND = "&"
    EOL = "eol"


class Redirection(BaseModel):
    op: str = Field(description="Operator text as written, e.g. '2>' or '>>'.")
    direction: RedirectDirection
    fd: Optional[int] = Field(default=None, description="Explicit file descriptor, if any.")
    target: str

    @property
    def effective_fd(self) -> int:
        """The descriptor being redirected, applying the shell defaults."""
        if self.fd is not None:
            return self.fd
        if self.direction == RedirectDirection.INPUT:
            return 0
        if self.direction == RedirectDirection.ERROR:
            return 2
        return 1


class Command(BaseModel):
    text: str = ""
    args: List[str] = Field(default_factory=list)
    redirections: List[Redirection] = Field(default_factory=list)
    subshell: Optional[CommandLinePlan] = Field(
        default=None, description="Body of a parenthesised group command."
    )

    @property
    def name(self) -> Optional[str]:
        return self.args[0] if self.args else None


class Pipeline(BaseModel):
    text: str = ""
    commands: List[Command] = Field(default_factory=list)


class PipelineLink(BaseModel):
    op: Optional[Joiner] = Field(default=None, description="Operator before this pipeline.")
    pipeline: Pipeline


class Conditional(BaseModel):
    text: str = ""
    links: List[PipelineLink] = Field(default_factory=list)


class ConditionalLink(BaseModel):
    conditional: Conditional
    terminator: Terminator = Terminator.EOL


class CommandLinePlan(BaseModel):
    conditionals: List[ConditionalLink] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.conditionals


class SyntaxErrorInfo(BaseModel):
    message: str
    token: str
    position: int


class ParseResult(BaseModel):
    """Outcome of parsing one line: either a plan or a syntax error, never both."""
    line: str
    plan: Optional[CommandLinePlan] = None
    error: Optional[SyntaxErrorInfo] = None

    @property
    def ok(self) -> bool:
        return self.error is None


Command.model_rebuild()
