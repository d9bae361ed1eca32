"""CLI entrypoints for projintel commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .config import load_config
from .engine import ProjectEngine
from .enhance import LLMEnhancer
from .errors import EngineError
from .logging import configure_logging
from .models import DocHeader, HealthInputs
from .scoring import context_score, skills_score


class InputError(EngineError):
    """Raised when a command-line input file cannot be used."""

    kind = "input"


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument("-v", "--verbose", **kwargs)


def _add_root_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="projintel",
        description="Detect tech stacks, track documentation headers and score project health.",
    )
    _add_verbose_option(parser)
    parser.add_argument("--log-file", type=Path, help="Also write debug logs to this file.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect_parser = subparsers.add_parser("detect", help="Report the detected tech stack.")
    _add_verbose_option(detect_parser, suppress_default=True)
    _add_root_argument(detect_parser)

    scan_parser = subparsers.add_parser(
        "scan", help="Report documentation status for every documentable file."
    )
    _add_verbose_option(scan_parser, suppress_default=True)
    _add_root_argument(scan_parser)
    scan_parser.add_argument(
        "--stamps",
        type=Path,
        help="JSON file mapping relative paths to header update timestamps (epoch seconds).",
    )

    header_parser = subparsers.add_parser("header", help="Read, format or write file headers.")
    _add_verbose_option(header_parser, suppress_default=True)
    header_commands = header_parser.add_subparsers(dest="header_command", required=True)

    show_parser = header_commands.add_parser("show", help="Print the parsed header of a file.")
    show_parser.add_argument("file", type=Path)

    format_parser = header_commands.add_parser(
        "format", help="Render a header JSON document as a comment block."
    )
    format_parser.add_argument("doc", type=Path, help="Header JSON file ('-' for stdin).")
    format_parser.add_argument("--language", required=True, help="Language tag such as ts or py.")

    apply_parser = header_commands.add_parser("apply", help="Write a header into a file.")
    apply_parser.add_argument("file", type=Path)
    apply_parser.add_argument("--doc", type=Path, required=True, help="Header JSON file ('-' for stdin).")

    generate_parser = header_commands.add_parser(
        "generate", help="Draft headers from detected symbols."
    )
    generate_parser.add_argument("files", type=Path, nargs="+")
    generate_parser.add_argument("--root", type=Path, default=Path("."), help="Project root.")
    generate_parser.add_argument(
        "--enhance",
        action="store_true",
        help="Refine drafts with the configured AI enhancer.",
    )
    generate_parser.add_argument(
        "--apply",
        action="store_true",
        help="Write the generated headers into the files.",
    )

    health_parser = subparsers.add_parser("health", help="Compute the project health score.")
    _add_verbose_option(health_parser, suppress_default=True)
    _add_root_argument(health_parser)
    health_parser.add_argument("--skills", type=int, default=0, help="Number of skills defined.")
    health_parser.add_argument("--context-used", type=int, default=None, help="Tokens in use.")
    health_parser.add_argument("--context-budget", type=int, default=None, help="Token budget.")
    health_parser.add_argument(
        "--enforcement", type=int, default=0, help="Enforcement component score (0-10)."
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


def _load_doc(source: Path) -> DocHeader:
    try:
        text = sys.stdin.read() if str(source) == "-" else source.read_text(encoding="utf-8")
    except OSError as exc:
        raise InputError(f"Failed to read {source}: {exc}") from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InputError(f"{source} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise InputError(f"{source} must contain a JSON object")
    return DocHeader.from_dict(payload)


def _load_stamps(source: Optional[Path]) -> Dict[str, float]:
    if source is None:
        return {}
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InputError(f"Failed to load header stamps from {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise InputError(f"{source} must contain a JSON object")
    return {
        str(key): float(value)
        for key, value in payload.items()
        if isinstance(value, (int, float)) and not isinstance(value, bool)
    }


def _health_inputs(args: argparse.Namespace) -> HealthInputs:
    context = 0
    if args.context_budget:
        context = context_score(args.context_used or 0, args.context_budget)
    return HealthInputs(
        skills=skills_score(max(args.skills, 0)),
        context=context,
        enforcement=args.enforcement,
    )


def _run_header(engine: ProjectEngine, args: argparse.Namespace) -> None:
    if args.header_command == "show":
        doc = engine.read_header(args.file)
        _print_json(doc.to_dict() if doc is not None else None)
    elif args.header_command == "format":
        print(engine.format_header(_load_doc(args.doc), args.language))
    elif args.header_command == "apply":
        engine.apply_header(args.file, _load_doc(args.doc))
        _print_json({"path": str(args.file), "status": "applied"})
    elif args.header_command == "generate":
        enhancer = None
        if args.enhance:
            config = load_config(args.root)
            enhancer = LLMEnhancer.from_config(config.enhancer)
        if args.apply:
            results = engine.batch_generate(args.files, args.root, enhancer=enhancer)
            _print_json([status.to_dict() for status in results])
        else:
            docs = [engine.generate_header(path, args.root, enhancer=enhancer) for path in args.files]
            _print_json([doc.to_dict() for doc in docs])


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for projintel commands; returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    engine = ProjectEngine()
    try:
        if args.command == "detect":
            _print_json(engine.detect_stack(args.path).to_dict())
        elif args.command == "scan":
            statuses = engine.scan_modules(args.path, header_stamps=_load_stamps(args.stamps))
            _print_json([status.to_dict() for status in statuses])
        elif args.command == "header":
            _run_header(engine, args)
        elif args.command == "health":
            _print_json(engine.compute_health(args.path, _health_inputs(args)).to_dict())
        elif args.command == "serve":
            from .service import run_service

            run_service(host=args.host, port=args.port)
    except EngineError as exc:
        _print_json({"error": exc.to_dict()})
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
