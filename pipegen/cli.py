"""CLI entrypoints for pipegen commands."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from .builder import WorkflowBuilder
from .config import ConfigError, load_config
from .logging import configure_logging
from .models import CIProvider, GeneratedConfig, SourceKind
from .orchestrator import AnalysisState


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
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_repository_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("owner", help="Repository owner or group.")
    parser.add_argument("repo", help="Repository name.")
    parser.add_argument(
        "--source",
        choices=[kind.value for kind in SourceKind],
        default=SourceKind.GITHUB.value,
        help="Hosting service the repository lives on (defaults to github).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pipegen",
        description="Assemble CI/CD pipelines from repository analysis and generate provider configs.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=".",
        help="Path to .pipegen.yml or the directory containing it (defaults to current directory).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Append logs to this file (overrides logging.file from .pipegen.yml).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a repository and show the suggested pipeline stages.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_repository_arguments(analyze_parser)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Analyze a repository and generate a CI/CD configuration for it.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_repository_arguments(generate_parser)
    generate_parser.add_argument(
        "--provider",
        choices=[provider.value for provider in CIProvider],
        default=None,
        help="Target CI provider (defaults to default_provider from .pipegen.yml).",
    )
    generate_parser.add_argument(
        "--output",
        default=None,
        help="Write the generated configuration to this file instead of stdout.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for pipegen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(Path(args.config))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    log_file = Path(args.log_file) if args.log_file else config.log_file
    configure_logging(verbose=bool(args.verbose), log_file=log_file)

    if args.command == "serve":
        from .service import run_service

        run_service(config, host=args.host, port=args.port)
        return

    builder = WorkflowBuilder(config)

    if args.command == "analyze":
        state = asyncio.run(builder.analyze_repository(args.owner, args.repo, args.source))
        if state is not AnalysisState.ANALYZED:
            parser.exit(1, f"pipegen analyze failed: {builder.analysis_error}\n")
        result = builder.analysis.result
        if result is None:
            parser.exit(1, "pipegen analyze failed: no analysis result was recorded\n")
        print(result.summary())
        print("")
        print("Suggested stages:")
        for index, node in enumerate(builder.graph.nodes, start=1):
            print(f"  {index}. {node.label} ({node.category})")
    elif args.command == "generate":
        outcome = asyncio.run(_analyze_and_generate(builder, args))
        if outcome is None:
            parser.exit(1, f"pipegen generate failed: {builder.analysis_error}\n")
        if outcome.error:
            parser.exit(1, f"pipegen generate failed: {outcome.error}\n")
        if args.output:
            output_path = Path(args.output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(outcome.yaml, encoding="utf-8")
            print(f"Configuration written to {_relativize(output_path.resolve())}")
        else:
            print(outcome.yaml)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


async def _analyze_and_generate(
    builder: WorkflowBuilder, args: argparse.Namespace
) -> GeneratedConfig | None:
    state = await builder.analyze_repository(args.owner, args.repo, args.source)
    if state is not AnalysisState.ANALYZED:
        return None
    return await builder.generate_config(args.provider)


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
