"""Export symbol extractor."""

import re

from .base import BaseExtractor


class ExportExtractor(BaseExtractor):
    """Extract exported symbol names.

    Two conventions are recognized:
    - ``export [default] [async] function|class|const|let|var|interface|type|enum Name``
    - Top-level (unindented) Python ``def`` / ``class`` declarations

    Results keep source order and may contain duplicates.
    """

    ES_EXPORT_PATTERN = re.compile(
        r"\bexport\s+(?:default\s+)?(?:async\s+)?"
        r"(?:function\*?|class|const|let|var|interface|type|enum)\s+([A-Za-z_$][\w$]*)"
    )
    PY_TOP_LEVEL_PATTERN = re.compile(r"^(?:async\s+)?(?:def|class)\s+(\w+)", re.MULTILINE)

    @property
    def name(self) -> str:
        return "exports"

    def extract(self, content: str, file_path: str = "") -> tuple[str, ...]:
        if not content:
            return ()

        exports = [m.group(1) for m in self.ES_EXPORT_PATTERN.finditer(content)]
        exports.extend(m.group(1) for m in self.PY_TOP_LEVEL_PATTERN.finditer(content))
        return tuple(exports)
