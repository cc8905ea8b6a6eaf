"""Standalone CLI for running the log analysis workflow.

Usage::

    python -m logcore.cli.analyze --path /var/log/app.log
    python -m logcore.cli.analyze --url https://example.com/raw/build.log --json
    cat app.log | python -m logcore.cli.analyze --text - --context "focus on timeouts"

Exactly one of ``--path``, ``--url``, or ``--text`` is required.  The
markdown report and the concise summary go to stdout (or ``--output``);
log lines and progress messages go to stderr.

Exit codes: 0 on success, 1 when the workflow fails (bad input, load
failure, LLM failure, configuration error), 2 on usage errors.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import time
from pathlib import Path

from logcore.config.settings import Settings
from logcore.models.document import AnalysisRequest
from logcore.models.pipeline import Report
from logcore.utils.errors import LogCoreError
from logcore.utils.logging import configure_logging

# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_text_output(report: Report) -> str:
    """Markdown report followed by the concise summary."""
    sep = "=" * 60
    return "\n".join(
        [
            report.markdown.rstrip(),
            "",
            sep,
            "  SUMMARY",
            sep,
            report.summary.strip(),
        ]
    )


def _format_json_output(report: Report) -> str:
    return json.dumps(report.model_dump(), indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


async def _run(request: AnalysisRequest, settings: Settings) -> Report:
    """Build the pipeline, run it once, and release its HTTP client."""
    # Deferred import: building providers pulls in the LLM SDKs.
    from logcore.main import build_pipeline

    components = build_pipeline(settings)
    try:
        return await components.pipeline.run(request)
    finally:
        await components.loader.aclose()


def _build_request(args: argparse.Namespace) -> AnalysisRequest:
    text = args.text
    if text == "-":
        text = sys.stdin.read()
    return AnalysisRequest(
        path=str(Path(args.path).resolve()) if args.path else None,
        url=args.url,
        text=text,
        analysis_context=args.context,
    )


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m logcore.cli.analyze",
        description=(
            "Analyze a log file, URL, or raw text. Produces a markdown report "
            "with key findings and a concise summary."
        ),
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--path", type=str, help="Local file to analyze.")
    source.add_argument("--url", type=str, help="HTTP/HTTPS URL of raw text content.")
    source.add_argument("--text", type=str, help='Raw text to analyze ("-" reads stdin).')
    parser.add_argument(
        "--context",
        type=str,
        default=None,
        help='Extra analysis instructions, e.g. "Look for timeout errors".',
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output {markdown, summary} as JSON.",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write results to a file instead of stdout.",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log warnings and errors (implied by --json).",
    )
    return parser


def main(argv: list[str] | None = None, settings: Settings | None = None) -> int:
    """Parse arguments, run the workflow, print the report.  Returns the exit code."""
    args = _build_parser().parse_args(argv)
    settings = settings or Settings()

    quiet = args.quiet or args.json_output
    configure_logging(
        log_level="WARNING" if quiet else settings.log_level,
        stream=sys.stderr,
    )
    if quiet:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)

    request = _build_request(args)
    start = time.monotonic()
    try:
        report = asyncio.run(_run(request, settings))
    except LogCoreError as exc:
        print(f"Error ({type(exc).__name__}): {exc}", file=sys.stderr)
        return 1
    if not quiet:
        print(f"Done in {time.monotonic() - start:.1f}s", file=sys.stderr)

    text = _format_json_output(report) if args.json_output else _format_text_output(report)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Results written to: {args.output}", file=sys.stderr)
    else:
        print(text)
    return 0


if __name__ == "__main__":
    sys.exit(main())
