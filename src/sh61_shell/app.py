from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, List, Optional

from tqdm import tqdm

from sh61_shell.core.core import extended_syntax_enabled, parse_command_line
from sh61_shell.core.managers.config_manager import config_manager
from sh61_shell.core.tokenizer import ShellTokenizer
from sh61_shell.core.utils.configure_logging import configure_logger
from sh61_shell.model import Command, CommandLinePlan, ParseResult

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SYNTAX_ERROR = 2


def _render_command(command: Command, depth: int) -> List[str]:
    pad = "  " * depth
    lines = [f"{pad}command {command.args!r}"]
    for r in command.redirections:
        fd = "" if r.fd is None else f" fd={r.fd}"
        lines.append(f"{pad}  redirect {r.direction.value}{fd} -> {r.target!r}")
    if command.subshell is not None:
        lines.append(f"{pad}  subshell")
        lines.extend(render_plan(command.subshell, depth + 2))
    return lines


def render_plan(plan: CommandLinePlan, depth: int = 0) -> List[str]:
    """Renders a plan as an indented tree, one node per line."""
    pad = "  " * depth
    lines: List[str] = []
    for link in plan.conditionals:
        lines.append(f"{pad}conditional [{link.terminator.value}] {link.conditional.text}")
        for pl in link.conditional.links:
            op = f"{pl.op.value} " if pl.op is not None else ""
            lines.append(f"{pad}  {op}pipeline {pl.pipeline.text}")
            for command in pl.pipeline.commands:
                lines.extend(_render_command(command, depth + 2))
    return lines


def _print_result(result: ParseResult, args: argparse.Namespace, extended: bool) -> None:
    if args.tokens:
        for token in ShellTokenizer(result.line, extended=extended):
            print(f"{token.type_name():<12} {token.raw!r}")
    if args.json:
        print(result.model_dump_json(indent=2 if args.pretty else None))
    elif result.ok:
        print("\n".join(render_plan(result.plan)))
    if not result.ok:
        print(f"sh61: {result.error.message}", file=sys.stderr)


def _read_lines(path: str) -> List[str]:
    if path == "-":
        return sys.stdin.read().splitlines()
    with open(path, "r", encoding="utf-8") as f:
        return f.read().splitlines()


def _with_progress(lines: List[str], source: str) -> Iterable[str]:
    threshold = config_manager.get_nested("cli.progress_min_lines", 200)
    if len(lines) < threshold:
        return lines
    return tqdm(lines, desc=f"Parsing {source}", unit="line", file=sys.stderr)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sh61-parse",
        description="Parse shell command lines and show their conditionals, pipelines and commands.",
    )
    parser.add_argument("lines", nargs="*", metavar="LINE", help="Command line(s) to parse.")
    parser.add_argument("-f", "--file", help="Parse every line of FILE ('-' for stdin).")
    parser.add_argument("--tokens", action="store_true", help="Also list the tokens of each line.")
    parser.add_argument("--json", action="store_true", help="Print each result as JSON.")
    parser.add_argument("--pretty", action="store_true", help="Indent JSON output.")
    parser.add_argument("--no-extended", action="store_true", help="Treat '(' and ')' as unsupported.")
    parser.add_argument("--log-level", default=None, help="Logging level (default from settings).")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entrypoint for the sh61-parse command."""
    args = build_arg_parser().parse_args(argv)
    configure_logger(args.log_level or config_manager.get_nested("debug.level", "WARNING"))

    extended = False if args.no_extended else extended_syntax_enabled()

    if args.file:
        try:
            lines = _with_progress(_read_lines(args.file), args.file)
        except OSError as e:
            logger.error("Cannot read %s: %s", args.file, e)
            print(f"sh61: {args.file}: {e.strerror}", file=sys.stderr)
            return 1
    else:
        lines = args.lines

    status = EXIT_OK
    for line in lines:
        result = parse_command_line(line, extended=extended)
        _print_result(result, args, extended)
        if not result.ok:
            status = EXIT_SYNTAX_ERROR
    return status


if __name__ == "__main__":
    sys.exit(main())
