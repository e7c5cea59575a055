"""Regex-based structural analysis of source text.

This is an approximate classifier, not a parser. Declaration bodies end at
the first line that starts with a closing brace (or, for Python, at the end
of the indented block), so nested or unusually formatted code may be
captured incompletely.
"""

import re
from pathlib import PurePosixPath

from .models import ClassInfo, FileAnalysis, FunctionInfo, InterfaceInfo
from .patterns import detect_patterns

EXTENSION_LANGUAGE: dict[str, str] = {
    ".py": "python",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".java": "java",
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
}

# Module name
DEFAULT_EXPORT_CLASS_PATTERN = re.compile(r"export\s+default\s+(?:abstract\s+)?class\s+(\w+)")
MODULE_EXPORTS_PATTERN = re.compile(r"module\.exports\s*=\s*(\w+)")

# Declarations. A body is either closed on the same line or runs until the
# first line starting with "}".
INTERFACE_PATTERN = re.compile(
    r"^[ \t]*(?:export\s+)?(?:default\s+)?interface\s+(\w+)\s*(?:<[^>{]*>)?"
    r"(?:\s*extends\s+([\w\s,.<>]+?))?\s*"
    r"\{(?:([^{}\n]*)\}|(.*?)^\})",
    re.MULTILINE | re.DOTALL,
)
CLASS_PATTERN = re.compile(
    r"^[ \t]*(?:export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(\w+)\s*(?:<[^>{]*>)?"
    r"(?:\s+extends\s+([\w.]+)\s*(?:<[^>{]*>)?)?"
    r"(?:\s+implements\s+([\w\s,.<>]+?))?\s*"
    r"\{(?:([^{}\n]*)\}|(.*?)^\})",
    re.MULTILINE | re.DOTALL,
)
PY_CLASS_PATTERN = re.compile(
    r"^class\s+(\w+)\s*(?:\(([^)]*)\))?\s*:[^\n]*\n((?:[ \t]+[^\n]*\n|[ \t]*\n)*)",
    re.MULTILINE,
)

# Members. Signatures are matched within one line and a member may end at a
# brace, a semicolon or the end of the line.
TS_METHOD_PATTERN = re.compile(
    r"^[ \t]*(?:(?:public|private|protected|static|readonly|abstract|async|override|get|set)[ \t]+)*"
    r"(\w+)[ \t]*(?:<[^>()]*>)?[ \t]*\(([^)]*)\)[ \t]*"
    r"(?::[ \t]*([^{;=\s](?:[^{;=\n]*[^{;=\s])?))?[ \t]*(?:[{;]|$)",
    re.MULTILINE,
)
TS_PROPERTY_PATTERN = re.compile(
    r"^[ \t]*(?:(?:public|private|protected|static|readonly|declare|override)[ \t]+)*"
    r"(\w+)[?!]?[ \t]*(?=[:=])(?::[ \t]*([^;=\s](?:[^;=\n]*[^;=\s])?))?[ \t]*"
    r"(?:=[^;\n]*)?[;,]?[ \t]*$",
    re.MULTILINE,
)
PY_METHOD_PATTERN = re.compile(
    r"^([ \t]+)(?:async\s+)?def\s+(\w+)\s*\(",
    re.MULTILINE,
)
PY_PROPERTY_PATTERN = re.compile(
    r"^([ \t]+)(\w+)[ \t]*:[ \t]*([^=\s](?:[^=\n]*[^=\s])?)[ \t]*(?:=.*)?$",
    re.MULTILINE,
)
INDENT_PATTERN = re.compile(r"^([ \t]+)\S", re.MULTILINE)

# Top-level functions
TS_FUNCTION_PATTERN = re.compile(
    r"^(export\s+)?(?:default\s+)?(async\s+)?function\s*\*?\s*(\w+)\s*(?:<[^>()]*>)?"
    r"\s*\(([^)]*)\)\s*(?::\s*([^{]+?))?\s*\{",
    re.MULTILINE,
)
ARROW_FUNCTION_PATTERN = re.compile(
    r"^(export\s+)?const\s+(\w+)\s*(?::[^=\n]+)?=\s*(async\s+)?"
    r"(?:\(([^)]*)\)|(\w+))\s*(?::\s*([^=\n]+?))?\s*=>",
    re.MULTILINE,
)
PY_FUNCTION_PATTERN = re.compile(
    r"^(async\s+)?def\s+(\w+)\s*\(([^)]*)\)\s*(?:->\s*([^:]+?))?\s*:",
    re.MULTILINE,
)

# Dependencies
ES_IMPORT_PATTERN = re.compile(
    r"import\s+(?:type\s+)?(?:\{[^}]*\}|\*\s+as\s+\w+|\w+(?:\s*,\s*\{[^}]*\})?)"
    r"\s+from\s+['\"]([^'\"]+)['\"]"
)
REQUIRE_PATTERN = re.compile(r"require\(\s*['\"]([^'\"]+)['\"]\s*\)")
INCLUDE_PATTERN = re.compile(r"#include\s+[\"'<]([^\"'>]+)[\"'>]")
PY_RELATIVE_IMPORT_PATTERN = re.compile(r"^[ \t]*from\s+(\.+)([\w.]*)\s+import\b", re.MULTILINE)

KEYWORDS = {
    "if", "for", "while", "switch", "catch", "return", "function", "else",
    "new", "super", "throw", "typeof", "await", "do", "try", "with",
    "elif", "except", "finally", "pass", "lambda", "case", "default",
}


def detect_language(path: str) -> str:
    """Guess the language of a file from its extension."""
    return EXTENSION_LANGUAGE.get(PurePosixPath(path).suffix.lower(), "unknown")


def analyze_content(text: str) -> FileAnalysis:
    """Extract a structural summary from raw file text.

    Args:
        text: The file contents.

    Returns:
        A FileAnalysis with whatever the patterns could find.
    """
    if not text.endswith("\n"):
        text += "\n"

    return FileAnalysis(
        module_name=extract_module_name(text),
        interfaces=extract_interfaces(text),
        classes=extract_classes(text),
        functions=extract_functions(text),
        dependencies=extract_dependencies(text),
        patterns=detect_patterns(text),
    )


def extract_module_name(text: str) -> str | None:
    """Get the module name from a default-exported class or `module.exports`."""
    for pattern in (DEFAULT_EXPORT_CLASS_PATTERN, MODULE_EXPORTS_PATTERN):
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def extract_interfaces(text: str) -> list[InterfaceInfo]:
    """Get interface declarations."""
    interfaces = []
    for match in INTERFACE_PATTERN.finditer(text):
        name, extends, inline_body, block_body = match.groups()
        body = inline_body if inline_body is not None else block_body or ""
        methods = _ts_methods(body)
        interfaces.append(
            InterfaceInfo(
                name=name,
                extends=_split_names(extends),
                methods=methods,
                properties=_ts_properties(body, exclude=methods),
            )
        )
    return interfaces


def extract_classes(text: str) -> list[ClassInfo]:
    """Get class declarations, both brace-delimited and Python-style."""
    classes = []

    for match in CLASS_PATTERN.finditer(text):
        name, parent, implements, inline_body, block_body = match.groups()
        body = inline_body if inline_body is not None else block_body or ""
        methods = _ts_methods(body)
        classes.append(
            ClassInfo(
                name=name,
                parent=parent,
                implements=_split_names(implements),
                methods=methods,
                properties=_ts_properties(body, exclude=methods),
                patterns=detect_patterns(match.group(0)),
            )
        )

    for match in PY_CLASS_PATTERN.finditer(text):
        name, bases, body = match.groups()
        base_names = [
            b for b in _split_names(bases)
            if "=" not in b and b not in ("object", "")
        ]
        # Members count only at the class body's own indentation level
        indent_match = INDENT_PATTERN.search(body)
        indent = indent_match.group(1) if indent_match else ""
        methods = [
            m.group(2) for m in PY_METHOD_PATTERN.finditer(body) if m.group(1) == indent
        ]
        properties = [
            m.group(2)
            for m in PY_PROPERTY_PATTERN.finditer(body)
            if m.group(1) == indent and m.group(2) not in KEYWORDS
        ]
        classes.append(
            ClassInfo(
                name=name,
                parent=base_names[0] if base_names else None,
                implements=base_names[1:],
                methods=_unique(methods),
                properties=_unique(properties),
                patterns=detect_patterns(match.group(0)),
            )
        )

    return classes


def extract_functions(text: str) -> list[FunctionInfo]:
    """Get top-level function declarations."""
    found: list[tuple[int, FunctionInfo]] = []

    for match in TS_FUNCTION_PATTERN.finditer(text):
        exported, is_async, name, params, return_type = match.groups()
        found.append((
            match.start(),
            FunctionInfo(
                name=name,
                params=_split_params(params),
                return_type=return_type.strip() if return_type else None,
                is_async=bool(is_async),
                is_exported=bool(exported),
            ),
        ))

    for match in ARROW_FUNCTION_PATTERN.finditer(text):
        exported, name, is_async, params, single_param, return_type = match.groups()
        found.append((
            match.start(),
            FunctionInfo(
                name=name,
                params=_split_params(params) if params is not None else [single_param],
                return_type=return_type.strip() if return_type else None,
                is_async=bool(is_async),
                is_exported=bool(exported),
            ),
        ))

    for match in PY_FUNCTION_PATTERN.finditer(text):
        is_async, name, params, return_type = match.groups()
        found.append((
            match.start(),
            FunctionInfo(
                name=name,
                params=_split_params(params),
                return_type=return_type.strip() if return_type else None,
                is_async=bool(is_async),
                is_exported=not name.startswith("_"),
            ),
        ))

    found.sort(key=lambda item: item[0])
    return [info for _, info in found]


def extract_dependencies(text: str) -> list[str]:
    """Get import, require and include targets in textual order."""
    found: list[tuple[int, str]] = []

    for pattern in (ES_IMPORT_PATTERN, REQUIRE_PATTERN, INCLUDE_PATTERN):
        for match in pattern.finditer(text):
            found.append((match.start(), match.group(1)))

    for match in PY_RELATIVE_IMPORT_PATTERN.finditer(text):
        found.append((match.start(), _python_relative_to_path(match.group(1), match.group(2))))

    found.sort(key=lambda item: item[0])
    return _unique(target for _, target in found)


def _python_relative_to_path(dots: str, module: str) -> str:
    """Rewrite `from ..a.b import x` as the path-style target `../a/b`."""
    prefix = "./" if len(dots) == 1 else "../" * (len(dots) - 1)
    if not module:
        return prefix.rstrip("/")
    return prefix + module.replace(".", "/")


def _ts_methods(body: str) -> list[str]:
    """Get method names declared in a brace-delimited body."""
    return _unique(
        m.group(1) for m in TS_METHOD_PATTERN.finditer(body) if m.group(1) not in KEYWORDS
    )


def _ts_properties(body: str, exclude: list[str]) -> list[str]:
    """Get property names declared in a brace-delimited body, skipping methods."""
    return _unique(
        m.group(1)
        for m in TS_PROPERTY_PATTERN.finditer(body)
        if m.group(1) not in KEYWORDS and m.group(1) not in exclude
    )


def _split_names(value: str | None) -> list[str]:
    """Split a comma-separated list of type names, dropping generic arguments."""
    if not value:
        return []
    value = re.sub(r"<[^<>]*>", "", value)
    return [part.strip() for part in value.split(",") if part.strip()]


def _split_params(value: str | None) -> list[str]:
    """Split a parameter list, collapsing whitespace inside each parameter."""
    if not value:
        return []
    return [" ".join(part.split()) for part in value.split(",") if part.strip()]


def _unique(items) -> list[str]:
    """Drop repeated items, keeping first occurrences in order."""
    seen: set[str] = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result
