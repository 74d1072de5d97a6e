"""Import statement extractor.

Recognizes relative imports in two conventions:

- ES modules / CommonJS: ``import x from './a'``, ``import './a'``,
  ``export { x } from './a'``, ``require('./a')``, ``import('./a')``
- Python relative imports: ``from .a import x``, ``from ..pkg.a import x``,
  ``from . import a, b``

Only targets starting with ``.`` are kept; each is resolved against the
importing file's directory into a repository-relative path without extension.
"""

import re

from .base import BaseExtractor, parent_directory, resolve_relative_path, unique


class ImportExtractor(BaseExtractor):
    """Extract resolved relative import paths from source text.

    Example:
        >>> ImportExtractor().extract("import { a } from '../lib/db'", "src/app/page.ts")
        ('src/lib/db',)
    """

    # Clause spans are bounded so a stray ``import`` never rescans the file
    JS_IMPORT_PATTERN = re.compile(
        r"""(?:
            \b(?:import|export)\b[^;'"`]{0,1000}?\bfrom\s*['"]([^'"\n]+)['"]   # import/export ... from '...'
          | \bimport\s+['"]([^'"\n]+)['"]                                  # import '...'
          | \brequire\s*\(\s*['"]([^'"\n]+)['"]\s*\)                        # require('...')
          | \bimport\s*\(\s*['"]([^'"\n]+)['"]\s*\)                         # import('...')
        )""",
        re.VERBOSE,
    )

    PY_FROM_IMPORT_PATTERN = re.compile(
        r"^[ \t]*from[ \t]+(\.+)(\w[\w.]*)?[ \t]+import[ \t]+\(?([^)\n#]*)",
        re.MULTILINE,
    )

    @property
    def name(self) -> str:
        return "imports"

    def extract(self, content: str, file_path: str = "") -> tuple[str, ...]:
        if not content:
            return ()

        directory = parent_directory(file_path)
        imports: list[str] = []

        for match in self.JS_IMPORT_PATTERN.finditer(content):
            import_path = next((group for group in match.groups() if group), "")
            if import_path.startswith("."):
                imports.append(resolve_relative_path(directory, import_path))

        for match in self.PY_FROM_IMPORT_PATTERN.finditer(content):
            imports.extend(self._resolve_python_import(directory, *match.groups()))

        return unique(path for path in imports if path)

    def _resolve_python_import(self, directory: str, dots: str, module: str, names: str) -> list[str]:
        """Resolve ``from <dots><module> import <names>`` to module paths."""
        base = resolve_relative_path(directory, "/".join([".."] * (len(dots) - 1)))

        if module:
            return [resolve_relative_path(base, module.replace(".", "/"))]

        # from . import a, b -> sibling modules a and b
        return [
            resolve_relative_path(base, name)
            for name in parse_imported_names(names)
        ]


def parse_imported_names(names: str) -> list[str]:
    """Split an import name list into the imported symbol names.

    ``a as b`` yields ``a``; ``type`` modifiers and ``*`` are dropped.
    """
    result = []
    for raw in names.split(","):
        name = raw.strip().strip("()").strip()
        name = re.sub(r"^type\s+", "", name)
        name = re.split(r"\s+as\s+", name)[0].strip()
        if re.fullmatch(r"[A-Za-z_$][\w$]*", name):
            result.append(name)
    return result
