"""External API / integration detector.

Combines two strategies:

1. Literal ``http(s)://`` URLs passed to network calls (``fetch``, ``axios``,
   ``requests``, ``httpx``), including template-literal and f-string URLs whose
   interpolated segments are replaced by a placeholder.
2. Known-SDK name matching against a fixed table of product names.
"""

import re

from ..constants import SDK_PATTERNS, URL_PLACEHOLDER
from .base import BaseExtractor, unique


class ExternalApiDetector(BaseExtractor):
    """Detect external services a file talks to.

    Example:
        >>> ExternalApiDetector().extract("await fetch(`https://api.x.io/u/${id}`)")
        ('https://api.x.io/u/{...}',)
    """

    NETWORK_CALL = (
        r"(?:\bfetch"
        r"|\baxios(?:\.(?:get|post|put|delete|patch))?"
        r"|\brequests\.(?:get|post|put|delete|patch|request)"
        r"|\bhttpx\.(?:get|post|put|delete|patch|request))"
    )

    LITERAL_URL_PATTERN = re.compile(
        NETWORK_CALL + r"\s*\(\s*[fF]?[`'\"](https?://[^'\"`\s]{1,2000})"
    )
    TEMPLATE_URL_PATTERN = re.compile(
        r"(?:\bfetch|\baxios)\s*\(\s*`([^`]{0,2000})`"
    )
    INTERPOLATION_PATTERN = re.compile(r"\$?\{[^}]*\}")

    def __init__(self, sdk_patterns: list[tuple[re.Pattern, str]] | None = None):
        self.sdk_patterns = sdk_patterns if sdk_patterns is not None else SDK_PATTERNS

    @property
    def name(self) -> str:
        return "external_apis"

    def extract(self, content: str, file_path: str = "") -> tuple[str, ...]:
        if not content:
            return ()

        apis: list[str] = []

        for match in self.LITERAL_URL_PATTERN.finditer(content):
            apis.append(self._normalize(match.group(1)))

        for match in self.TEMPLATE_URL_PATTERN.finditer(content):
            if "${" in match.group(1):
                apis.append(self._normalize(match.group(1)))

        for pattern, label in self.sdk_patterns:
            if pattern.search(content):
                apis.append(label)

        return unique(apis)

    def _normalize(self, url: str) -> str:
        return self.INTERPOLATION_PATTERN.sub(URL_PLACEHOLDER, url)
