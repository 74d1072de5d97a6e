"""HTTP method detector for route handler files."""

import re

from ..constants import HTTP_METHODS
from .base import BaseExtractor, unique

_VERBS = "|".join(HTTP_METHODS)


class HttpMethodDetector(BaseExtractor):
    """Detect HTTP verbs declared by route handlers.

    Conventions:
    - Method-call style (Express): ``router.get(...)``, ``app.post(...)``
    - Named-export style (Next.js route handlers): ``export async function GET``
    - Decorator style (FastAPI/Flask blueprints): ``@router.delete(...)``

    Example:
        >>> HttpMethodDetector().extract("router.get('/', h)\\nrouter.post('/', h)")
        ('GET', 'POST')
    """

    METHOD_CALL_PATTERN = re.compile(
        rf"(?<!@)\b(?:router|app)\.({_VERBS})\s*\(", re.IGNORECASE
    )
    NAMED_EXPORT_PATTERN = re.compile(
        rf"\bexport\s+(?:async\s+)?function\s+({_VERBS})\b"
    )
    DECORATOR_PATTERN = re.compile(
        rf"@(?:app|router)\.({_VERBS})\s*\(", re.IGNORECASE
    )

    @property
    def name(self) -> str:
        return "http_methods"

    def extract(self, content: str, file_path: str = "") -> tuple[str, ...]:
        if not content:
            return ()

        methods: list[str] = []
        for pattern in (self.METHOD_CALL_PATTERN, self.NAMED_EXPORT_PATTERN, self.DECORATOR_PATTERN):
            methods.extend(m.group(1).upper() for m in pattern.finditer(content))
        return unique(methods)
