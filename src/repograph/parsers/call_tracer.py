"""Inter-file call tracer.

A best-effort static call graph between a file and the files it imports.
There is no control-flow or alias analysis: the tracer reports symbols that
look called, nothing more. Two usage patterns are recognized:

1. Member calls on a module alias: ``user.getUser(...)`` where ``user`` is the
   imported file's basename, or a default/namespace import bound to it.
2. Direct calls of named imports from relative sources:
   ``import { getUser } from './services/user'`` then ``getUser(...)``
   (Python ``from .services.user import get_user`` works the same way).
"""

import re
from collections.abc import Sequence

from ..models.graph import CallTrace
from .base import parent_directory, resolve_relative_path, strip_extension, unique
from .imports import parse_imported_names


class CallTracer:
    """Trace calls from a file into its resolved import targets.

    Example:
        >>> tracer = CallTracer()
        >>> content = "import { getUser } from './services/user'\\ngetUser(1)"
        >>> tracer.trace(content, "src/index.ts", ["src/services/user.ts"])
        (CallTrace(target='src/services/user.ts', functions=('getUser',)),)
    """

    JS_NAMED_IMPORT_PATTERN = re.compile(
        r"\bimport\s+(?:type\s+)?(?:[A-Za-z_$][\w$]*\s*,\s*)?\{([^}]{0,1000})\}\s*from\s*['\"]([^'\"\n]+)['\"]"
    )
    JS_BINDING_IMPORT_PATTERN = re.compile(
        r"\bimport\s+(?:\*\s+as\s+)?([A-Za-z_$][\w$]*)\s*(?:,\s*\{[^}]{0,1000}\})?\s*from\s*['\"]([^'\"\n]+)['\"]"
    )
    PY_NAMED_IMPORT_PATTERN = re.compile(
        r"^[ \t]*from[ \t]+(\.+\w[\w.]*)[ \t]+import[ \t]+\(?([^)\n#]*)",
        re.MULTILINE,
    )

    @property
    def name(self) -> str:
        return "call_tracer"

    def trace(
        self,
        content: str,
        file_path: str,
        targets: Sequence[str],
    ) -> tuple[CallTrace, ...]:
        """Find symbols called on each resolved target.

        Args:
            content: Text of the importing file
            file_path: Repository-relative path of the importing file
            targets: Node ids the file's imports resolved to

        Returns:
            One CallTrace per target with at least one observed call,
            in the order of ``targets``
        """
        if not content or not targets:
            return ()

        calls: dict[str, list[str]] = {target: [] for target in targets}
        directory = parent_directory(file_path)

        # Member calls on module aliases
        bindings = self._module_bindings(content, directory, targets)
        for target in targets:
            for alias in sorted(bindings.get(target, set()) | {_module_alias(target)}):
                if not alias:
                    continue
                pattern = re.compile(rf"(?<![\w$.]){re.escape(alias)}\.([A-Za-z_$][\w$]*)\s*\(")
                calls[target].extend(m.group(1) for m in pattern.finditer(content))

        # Direct calls of named imports
        for names, source in self._named_imports(content):
            target = _match_target(resolve_relative_path(directory, source), targets)
            if target is None:
                continue
            for imported, local in names:
                if re.search(rf"(?<![\w$.]){re.escape(local)}\s*\(", content):
                    calls[target].append(imported)

        return tuple(
            CallTrace(target=target, functions=unique(functions))
            for target, functions in calls.items()
            if functions
        )

    def _named_imports(self, content: str) -> list[tuple[list[tuple[str, str]], str]]:
        """Collect ``(imported, local)`` name pairs per relative source path."""
        result = []

        for match in self.JS_NAMED_IMPORT_PATTERN.finditer(content):
            source = match.group(2)
            if source.startswith("."):
                result.append((_name_pairs(match.group(1)), source))

        for match in self.PY_NAMED_IMPORT_PATTERN.finditer(content):
            module = match.group(1)
            dots = len(module) - len(module.lstrip("."))
            source = "/".join(["."] + [".."] * (dots - 1) + module[dots:].split("."))
            result.append((_name_pairs(match.group(2)), source))

        return result

    def _module_bindings(self, content: str, directory: str, targets: Sequence[str]) -> dict[str, set[str]]:
        """Map targets to identifiers bound by default/namespace imports."""
        bindings: dict[str, set[str]] = {}
        for match in self.JS_BINDING_IMPORT_PATTERN.finditer(content):
            local, source = match.groups()
            if not source.startswith("."):
                continue
            target = _match_target(resolve_relative_path(directory, source), targets)
            if target is not None:
                bindings.setdefault(target, set()).add(local)
        return bindings


def _name_pairs(names: str) -> list[tuple[str, str]]:
    """Parse ``a, b as c`` into ``[("a", "a"), ("b", "c")]``."""
    pairs = []
    for raw in names.split(","):
        parts = re.split(r"\s+as\s+", raw.strip().strip("()").strip())
        imported = parse_imported_names(parts[0])
        if not imported:
            continue
        local = parts[1].strip() if len(parts) > 1 else imported[0]
        if re.fullmatch(r"[A-Za-z_$][\w$]*", local):
            pairs.append((imported[0], local))
    return pairs


def _module_alias(target: str) -> str:
    """Identifier a module is conventionally referred to by.

    ``src/services/user.ts`` -> ``user``; ``src/api/index.ts`` -> ``api``.
    """
    segments = strip_extension(target).split("/")
    alias = segments[-1]
    if alias == "index" and len(segments) > 1:
        alias = segments[-2]
    return alias if re.fullmatch(r"[A-Za-z_$][\w$]*", alias) else ""


def _match_target(resolved: str, targets: Sequence[str]) -> str | None:
    """Find the target a resolved import path refers to."""
    if not resolved:
        return None
    for target in targets:
        if target == resolved or strip_extension(target) == resolved:
            return target
        if target.startswith(resolved + "/index."):
            return target
    return None
