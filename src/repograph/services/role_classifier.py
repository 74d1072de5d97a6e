"""Role Classifier for Repository Files.

Maps a file path, and optionally its content, to an architectural role.
Checks run in a fixed order and the first match wins:

    1. Entry-point filenames at the root or directly under ``src/``
    2. API / controller path markers
    3. Inline HTTP handler patterns (content only)
    4. Service markers
    5. Model / schema markers
    6. Utility markers
    7. Config markers
    8. Test markers
    9. ``file``

Path-only checks for API routes and controllers always run before any
content check, so ``controllers/users.ts`` stays a controller even when it
exports a ``GET`` function.
"""

import re
from typing import Optional

from ..models.graph import NodeRole


# (pattern, role) in evaluation order; patterns run on the lowercased path
# unless listed in _CASE_SENSITIVE_RULES
_ENTRY_RULES = [
    (re.compile(r"^(server|app|main|index)\.(ts|js|py|go|rs)$"), NodeRole.ENTRY),
    (re.compile(r"^src/(server|app|main|index)\.(ts|js|py)$"), NodeRole.ENTRY),
]

_ENDPOINT_RULES = [
    (re.compile(r"(?:^|/)app/api/(?:.*/)?route\.(ts|js)$"), NodeRole.API),
    (re.compile(r"(?:^|/)pages/api/"), NodeRole.API),
    (re.compile(r"(?:^|/)controllers?/"), NodeRole.CONTROLLER),
    (re.compile(r"(?:^|/)routes?/"), NodeRole.CONTROLLER),
    (re.compile(r"(?:^|/)endpoints?/"), NodeRole.CONTROLLER),
]

_CONTENT_RULES = [
    (re.compile(r"(?<!@)\b(?:router|app)\.(get|post|put|patch|delete)\s*\(", re.IGNORECASE), NodeRole.CONTROLLER),
    (re.compile(r"@(?:app|router)\.(get|post|put|patch|delete)\s*\(", re.IGNORECASE), NodeRole.CONTROLLER),
    (re.compile(r"\bexport\s+(?:async\s+)?function\s+(GET|POST|PUT|PATCH|DELETE)\b"), NodeRole.API),
]

_SERVICE_RULES = [
    (re.compile(r"(?:^|/)services?/"), NodeRole.SERVICE),
    (re.compile(r"(?:^|/)providers?/"), NodeRole.SERVICE),
]

# React hook naming convention (useSomething.ts) needs the original case
_HOOK_RULE = re.compile(r"(?:^|/)use[A-Z]\w*\.(ts|tsx|js|jsx)$")

_PATH_RULES = [
    (re.compile(r"(?:^|/)models?/"), NodeRole.MODEL),
    (re.compile(r"schema"), NodeRole.MODEL),
    (re.compile(r"(?:^|/)migrations?/"), NodeRole.MODEL),
    (re.compile(r"(?:^|/)entities?/"), NodeRole.MODEL),
    (re.compile(r"prisma"), NodeRole.MODEL),

    (re.compile(r"(?:^|/)utils?/"), NodeRole.UTIL),
    (re.compile(r"(?:^|/)helpers?/"), NodeRole.UTIL),
    (re.compile(r"(?:^|/)lib/"), NodeRole.UTIL),
    (re.compile(r"(?:^|/)common/"), NodeRole.UTIL),

    (re.compile(r"config"), NodeRole.CONFIG),
    (re.compile(r"\.env"), NodeRole.CONFIG),
    (re.compile(r"settings"), NodeRole.CONFIG),

    (re.compile(r"\.(test|spec)\.(ts|js|tsx|jsx|py)$"), NodeRole.TEST),
    (re.compile(r"(?:^|/)tests?/"), NodeRole.TEST),
    (re.compile(r"(?:^|/)__tests__/"), NodeRole.TEST),
]


def _first_match(rules, text: str) -> Optional[NodeRole]:
    for pattern, role in rules:
        if pattern.search(text):
            return role
    return None


def classify_role(path: str, content: Optional[str] = None) -> NodeRole:
    """Classify a file path into an architectural role.

    Pure and total: any string yields a role, ``NodeRole.FILE`` when nothing
    matches. Deciding that a path is a folder is the caller's job.

    Args:
        path: Repository-relative file path
        content: File text, when it has been fetched

    Returns:
        The first matching NodeRole

    Example:
        >>> classify_role("app/api/users/route.ts")
        <NodeRole.API: 'api'>
        >>> classify_role("src/handlers/users.js", "router.get('/', list)")
        <NodeRole.CONTROLLER: 'controller'>
    """
    lower = path.lower()

    role = _first_match(_ENTRY_RULES, lower) or _first_match(_ENDPOINT_RULES, lower)
    if role:
        return role

    if content:
        role = _first_match(_CONTENT_RULES, content)
        if role:
            return role

    role = _first_match(_SERVICE_RULES, lower)
    if role:
        return role
    if _HOOK_RULE.search(path):
        return NodeRole.SERVICE

    return _first_match(_PATH_RULES, lower) or NodeRole.FILE
