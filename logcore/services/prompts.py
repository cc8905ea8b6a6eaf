"""System instructions and user prompt builders for the three collaborator roles.

Every builder takes the optional analysis context and adds it as its own
section only when the caller supplied one, so the same text reaches every
call of a run unchanged.
"""

from __future__ import annotations

import re

INITIAL_ANALYZER_INSTRUCTIONS = """\
You are a senior software engineer who reads technical documents: log files,
build and test output, stack traces, configuration dumps, and plain prose.
You are given the FIRST part of a document that may continue in later parts.

Your job is to establish the structure and vocabulary of the document:
- identify what kind of document it is and what produced it
- identify the format of its records (timestamps, levels, components)
- note the key events, errors, warnings, and anomalies with their timestamps
- keep exact identifiers (error codes, task ids, file paths, hostnames)

Write a dense, factual working summary that later passes can extend.
Never invent information that is not in the text."""

REFINEMENT_AGENT_INSTRUCTIONS = """\
You maintain a running summary of a long technical document that is read
one part at a time. You receive the current summary and the next part.

- If the new part contains information that matters (new errors, state
  changes, root-cause evidence, timings, resolution of earlier problems),
  return updated=true and the full rewritten summary including it.
- If the new part adds nothing that matters (repetitive noise, heartbeats,
  routine output already covered), return updated=false. Do not rewrite a
  summary that does not need it.

Keep exact identifiers and timestamps. Keep the summary compact; merge
repeated events into counts instead of listing each one."""

REPORT_FORMATTER_INSTRUCTIONS = """\
You turn analysis notes about a technical document into clear reports for
engineers. Use markdown with short sections and bullet lists; avoid large
headings. Lead with what went wrong (or state plainly that nothing did),
then supporting evidence, then a timeline when one is relevant. Quote exact
error messages and identifiers. Never invent facts that are not in the
notes."""


_BACKTICK_RUN_RE = re.compile(r"`+")


def _fenced(text: str) -> str:
    """Wrap *text* in a code fence longer than any backtick run inside it."""
    longest = max((len(run) for run in _BACKTICK_RUN_RE.findall(text)), default=0)
    fence = "`" * max(3, longest + 1)
    return f"{fence}\n{text}\n{fence}"


def _context_section(analysis_context: str | None) -> str:
    if not analysis_context:
        return ""
    return f"\n\n## Additional context from the requester\n{analysis_context}"


def user_initial_prompt(chunk: str, analysis_context: str | None = None) -> str:
    """Prompt for the initial analyzer on chunk 0."""
    return (
        "Analyze the first part of the document below and write the initial "
        "working summary. Set updated=true."
        f"{_context_section(analysis_context)}\n\n"
        f"## Document (part 1)\n{_fenced(chunk)}"
    )


def user_refine_prompt(
    existing_summary: str,
    chunk: str,
    analysis_context: str | None = None,
) -> str:
    """Prompt for one refinement step: current summary plus the next chunk."""
    return (
        "Update the running summary with the next part of the document, or "
        "report that nothing worth adding was found."
        f"{_context_section(analysis_context)}\n\n"
        f"## Current summary\n{existing_summary}\n\n"
        f"## Next part of the document\n{_fenced(chunk)}"
    )


def user_markdown_prompt(summary: str, analysis_context: str | None = None) -> str:
    """Prompt for the full markdown report, built from the running summary."""
    return (
        "Write the final analysis report in markdown from the working notes "
        "below. Include an overview, the key findings, errors and warnings "
        "with evidence, and a timeline if the notes contain one."
        f"{_context_section(analysis_context)}\n\n"
        f"## Working notes\n{summary}"
    )


def user_concise_summary_prompt(markdown: str, analysis_context: str | None = None) -> str:
    """Prompt for the concise summary, built from the finished markdown report."""
    return (
        "Summarize the report below in at most five sentences of plain text. "
        "State the most important finding first."
        f"{_context_section(analysis_context)}\n\n"
        f"## Report\n{markdown}"
    )


def single_pass_prompt(text: str, analysis_context: str | None = None) -> str:
    """Prompt for analysing a document that fits into a single chunk."""
    return (
        "Analyze the complete document below. Return both a full markdown "
        "report (field `markdown`: overview, key findings, errors and "
        "warnings with evidence, timeline if relevant) and a concise plain "
        "text summary of at most five sentences (field `summary`)."
        f"{_context_section(analysis_context)}\n\n"
        f"## Document\n{_fenced(text)}"
    )
