"""File summary tool.

Describes a single file without reading it line by line: its language, its
length, the symbols it defines and whether it talks to external APIs. The
description is built from the same extractors the graph builder uses, so no
model or network access is involved.

Summaries are cached in ``AnalysisCaches.summaries`` under the hash of the
file text and its language, so the same text is only summarized once however
many paths or repositories it appears in.
"""

from typing import Any, Optional

from ..constants import SUMMARY_MAX_DEFINITIONS
from ..logging import get_logger
from ..parsers import ExtractorSet
from ..services.cache import AnalysisCaches, content_hash
from ..services.graph_builder import language_for_path

logger = get_logger(__name__)


def build_file_summary(
    content: str,
    file_path: str,
    extractors: Optional[ExtractorSet] = None,
) -> dict[str, Any]:
    """Summarize file text.

    Example:
        >>> build_file_summary("export function a() {}\\n", "src/a.ts")["summary"]
        'A TypeScript file with 2 lines. Defines: a.'
    """
    extractors = extractors or ExtractorSet()
    language = language_for_path(file_path)
    definitions = list(extractors.exports.extract(content, file_path))
    api_calls = list(extractors.external_apis.extract(content, file_path))
    line_count = len(content.split("\n"))

    summary = f"A {language} file with {line_count} lines."
    if definitions:
        summary += f" Defines: {', '.join(definitions[:SUMMARY_MAX_DEFINITIONS])}"
        if len(definitions) > SUMMARY_MAX_DEFINITIONS:
            summary += f" and {len(definitions) - SUMMARY_MAX_DEFINITIONS} more"
        summary += "."
    if api_calls:
        summary += " Makes external API calls."

    return {
        "summary": summary,
        "language": language,
        "lines": line_count,
        "exports": definitions,
        "apiCalls": api_calls,
    }


def summarize_file(
    content: str,
    file_path: str,
    caches: Optional[AnalysisCaches] = None,
) -> dict:
    """Summarize one file, serving repeated text from the summary cache.

    Args:
        content: Text of the file
        file_path: Path of the file, used for the language tag
        caches: Caches holding earlier summaries; a fresh set when omitted

    Returns:
        Dictionary containing:
        - file: The file path
        - summary: One or two sentences describing the file
        - language, lines: Language tag and line count
        - exports: Symbols the file defines
        - apiCalls: External APIs and URLs the file calls
        - cached: Whether the summary came from the cache

        or ``{"error": message}`` when content or path is missing.
    """
    if not content or not file_path or not file_path.strip():
        return {"error": "content and file_path are required"}

    caches = caches or AnalysisCaches.from_config()
    key = f"{content_hash(content)}:{language_for_path(file_path)}"

    cached = caches.summaries.get(key)
    if cached is not None:
        logger.debug("Serving cached summary for %s", file_path)
        return {"file": file_path, **cached, "cached": True}

    summary = build_file_summary(content, file_path)
    caches.summaries.set(key, summary)
    return {"file": file_path, **summary, "cached": False}
