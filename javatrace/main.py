#!/usr/bin/env python3
"""javatrace/main.py — command-line entry point.

Usage examples
--------------
    # Analyze a Java file and print the JSON payload
    javatrace analyze Factorial.java

    # Read from stdin, human-readable summary, tighter loop cap
    cat snippet.java | javatrace analyze - --format summary --loop-bound 3

    # Show which front-end strategy accepted the text and the tree it built
    javatrace parse Snippet.java --format sexp

Exit codes
----------
    0   Success.
    1   The analysis (or parse) failed; the failure payload is printed.
    2   Infrastructure failure (missing file, invalid option value).

The module doubles as ``python -m javatrace`` via ``javatrace/__main__.py``.
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
import textwrap
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, TextIO

from . import __version__
from .analyzer import AnalysisResult, analyze, failure_payload
from .config import (
    DEFAULT_LOOP_BOUND,
    DEFAULT_MAX_RECURSION_DEPTH,
    DEFAULT_MAX_STEPS,
    AnalysisConfig,
)
from .errors import AnalysisError
from .evaluator import java_str
from .frontend import parse_source
from .locator import find_methods
from .sexp import dump

_log = logging.getLogger("javatrace")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``javatrace`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("javatrace")
    root.setLevel(level)
    root.handlers = [handler]


def _read_source(raw: str) -> str:
    """Text of *raw*, or of stdin when *raw* is ``-``."""
    if raw == "-":
        return sys.stdin.read()
    p = Path(raw).expanduser().resolve()
    if not p.is_file():
        _log.error("source file not found: %s", p)
        raise SystemExit(EXIT_INFRA)
    return p.read_text(encoding="utf-8")


def _open_output(dest: Optional[str]) -> TextIO:
    """``sys.stdout`` for ``None``/``-``, otherwise the opened file."""
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def _write(dest: Optional[str], text: str) -> None:
    out = _open_output(dest)
    try:
        out.write(text)
        if not text.endswith("\n"):
            out.write("\n")
    finally:
        if out is not sys.stdout:
            out.close()


def _json_safe(value: Any) -> Any:
    """*value* with non-finite doubles spelled the way Java prints them."""
    if isinstance(value, float) and not math.isfinite(value):
        return java_str(value)
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(item) for item in value]
    return value


def _to_json(payload: Dict[str, Any], indent: Optional[int]) -> str:
    return json.dumps(_json_safe(payload), indent=indent, allow_nan=False)


def _format_summary(result: AnalysisResult) -> str:
    lines = [
        f"method:    {result.method.name}"
        f"({', '.join(f'{t} {n}' for t, n in result.method.parameters)})",
        f"strategy:  {result.parse.strategy}",
        f"recursion: {'yes' if result.has_recursion else 'no'}",
        "",
        "trace:",
    ]
    for step in result.trace.steps:
        details = ", ".join(
            f"{key}={java_str(value) if not isinstance(value, tuple) else len(value)}"
            for key, value in step.payload.items()
        )
        state = " ".join(f"{k}={java_str(v)}" for k, v in step.variables.items())
        lines.append(f"  #{step.index:<3} {step.kind.value:<21} {details}")
        if state:
            lines.append(f"       [{state}]")
    if result.variables:
        lines += ["", "variables:"]
        for record in result.variables:
            history = ", ".join(f"{i}:{java_str(v)}" for i, v in record.history)
            lines.append(f"  {record.type} {record.name}: {history}")
    if result.warnings:
        lines += ["", "warnings:"]
        lines += [f"  - {w}" for w in result.warnings]
    return "\n".join(lines)


# ===========================================================================
# Commands
# ===========================================================================

def cmd_analyze(args: argparse.Namespace) -> int:
    """Run the full analysis pipeline on one source file."""
    source = _read_source(args.source)
    try:
        config = AnalysisConfig(
            loop_bound=args.loop_bound,
            max_steps=args.max_steps,
            max_recursion_depth=args.max_recursion_depth,
        )
    except ValueError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA

    payload: Dict[str, Any]
    try:
        result = analyze(source, config)
    except AnalysisError as exc:
        _log.error("Analysis failed: %s", exc)
        payload = failure_payload(exc)
        if args.format == "summary":
            _write(args.output, f"error: {payload['error']}")
        else:
            _write(args.output, _to_json(payload, args.indent))
        return EXIT_ERROR

    if args.format == "summary":
        _write(args.output, _format_summary(result))
    else:
        _write(args.output, _to_json(result.to_dict(), args.indent))
    return EXIT_OK


def cmd_parse(args: argparse.Namespace) -> int:
    """Parse one source file and show the resulting tree."""
    source = _read_source(args.source)
    try:
        outcome = parse_source(source)
    except AnalysisError as exc:
        _log.error("%s", exc)
        for strategy, message in getattr(exc, "attempts", ()):
            _write(args.output, f";; {strategy}: {message}")
        return EXIT_ERROR

    lines = [f";; strategy: {outcome.strategy}"]
    lines += [f";; warning: {w}" for w in outcome.warnings]
    if args.format == "sexp":
        lines.append(dump(outcome.unit, with_locations=args.locations))
    else:
        for method in find_methods(outcome.unit):
            params = ", ".join(f"{p.type} {p.name}" for p in method.parameters)
            where = f"line {method.loc.line}" if not method.loc.synthetic else "synthetic"
            lines.append(f"{method.return_type} {method.name}({params})  [{where}]")
    _write(args.output, "\n".join(lines))
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="javatrace",
        description=(
            "javatrace — parse a Java method, summarize its control flow,\n"
            "detect recursion and simulate a bounded execution trace."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              javatrace analyze Factorial.java
              javatrace analyze - --format summary --loop-bound 3
              javatrace parse Snippet.java --format sexp
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_io_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("source", metavar="SOURCE", help='Java source file ("-" for stdin).')
        p.add_argument(
            "-o", "--output",
            default=None,
            metavar="FILE",
            help='Output file ("-" or omit for stdout).',
        )

    # --- analyze -----------------------------------------------------------
    p_analyze = subparsers.add_parser(
        "analyze",
        aliases=["analyse"],
        help="Analyze a Java method and print the trace payload.",
    )
    _add_io_args(p_analyze)
    p_analyze.add_argument(
        "-f", "--format",
        choices=["json", "summary"],
        default="json",
        help="Output format (default: json).",
    )
    p_analyze.add_argument(
        "--indent",
        type=int,
        default=2,
        metavar="N",
        help="JSON indentation (default: 2).",
    )
    g = p_analyze.add_argument_group("simulation bounds")
    g.add_argument(
        "--loop-bound",
        type=int,
        default=DEFAULT_LOOP_BOUND,
        metavar="N",
        help=f"Condition checks per loop execution (default: {DEFAULT_LOOP_BOUND}).",
    )
    g.add_argument(
        "--max-steps",
        type=int,
        default=DEFAULT_MAX_STEPS,
        metavar="N",
        help=f"Maximum trace length (default: {DEFAULT_MAX_STEPS}).",
    )
    g.add_argument(
        "--max-recursion-depth",
        type=int,
        default=DEFAULT_MAX_RECURSION_DEPTH,
        metavar="N",
        help=f"Deepest recursion-tree level (default: {DEFAULT_MAX_RECURSION_DEPTH}).",
    )
    p_analyze.set_defaults(func=cmd_analyze)

    # --- parse -------------------------------------------------------------
    p_parse = subparsers.add_parser(
        "parse",
        help="Parse Java source and print the syntax tree.",
    )
    _add_io_args(p_parse)
    p_parse.add_argument(
        "-f", "--format",
        choices=["sexp", "summary"],
        default="sexp",
        help="sexp: full tree; summary: declared methods (default: sexp).",
    )
    p_parse.add_argument(
        "--locations",
        action="store_true",
        help="Include :line/:column in the S-expression output.",
    )
    p_parse.set_defaults(func=cmd_parse)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the javatrace CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
