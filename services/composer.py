"""Turn fanout results into assistant reply text plus a citation list."""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from schemas.search import SourceDocument
from services.fanout import FanoutResult

RESULTS_PER_SOURCE = 3
SNIPPET_LENGTH = 200
ELLIPSIS = "..."
CITATION_LIMIT = 3

NOT_FOUND_MESSAGE = (
    "I searched the knowledge base but did not find specific documents matching your query. "
    "Please try rephrasing your question."
)
TROUBLESHOOTING = (
    "Check that the search endpoint, API key and index name are configured.",
    "Confirm the index contains documents and its indexer has completed a run.",
    "Try different keywords or a shorter question.",
)


@dataclass(frozen=True)
class ComposedResponse:
    text: str
    sources: Optional[List[Dict[str, Any]]]


def resolve_title(document: SourceDocument, position: int) -> str:
    """Display title, falling back to `Document N` (1-based)."""
    return document.title or f"Document {position}"


def truncate_snippet(content: str, limit: int = SNIPPET_LENGTH) -> str:
    if len(content) <= limit:
        return content
    return content[:limit] + ELLIPSIS


def resolve_content(document: SourceDocument) -> Optional[str]:
    """Snippet line for a result, or None when it has no text."""
    if not (document.content or "").strip():
        return None
    return truncate_snippet(document.content)


def _not_found(result: FanoutResult) -> str:
    parts = [NOT_FOUND_MESSAGE]

    if result.errors:
        lines = [f"- {source.label}: {error}" for source, error in result.errors]
        parts.append("Errors:\n" + "\n".join(lines))

    debug = [
        f"- {source.label}: endpoint={o.debug_info.endpoint}, index={o.debug_info.index}"
        for source, o in result.outcomes.items()
        if o.debug_info is not None
    ]
    if debug:
        parts.append("Debug info:\n" + "\n".join(debug))

    parts.append("Troubleshooting:\n" + "\n".join(f"- {line}" for line in TROUBLESHOOTING))
    return "\n\n".join(parts)


def compose(result: FanoutResult) -> ComposedResponse:
    """
    Build the assistant reply for one turn.

    With no results the reply is the not-found message followed by any
    adapter errors, debug endpoints and a troubleshooting checklist, and
    `sources` is None. Otherwise each source with results gets a section of
    at most RESULTS_PER_SOURCE titled snippets, and `sources` holds the first
    CITATION_LIMIT raw records.
    """
    total = result.total_results
    if total == 0:
        return ComposedResponse(text=_not_found(result), sources=None)

    parts = [f"Based on the search results, I found {total} relevant document(s)."]
    citations: List[Dict[str, Any]] = []

    for source, outcome in result.outcomes.items():
        if outcome.count == 0:
            continue
        lines = [f"**{source.label} ({outcome.count} result(s)):**"]
        for position, document in enumerate(outcome.results[:RESULTS_PER_SOURCE], start=1):
            lines.append("")
            lines.append(f"{position}. **{resolve_title(document, position)}**")
            snippet = resolve_content(document)
            if snippet is not None:
                lines.append(snippet)
        parts.append("\n".join(lines))
        citations.extend(document.raw for document in outcome.results)

    return ComposedResponse(text="\n\n".join(parts), sources=citations[:CITATION_LIMIT])
