"""Content analysis: heuristic structural summaries of source files."""

from .analyzer import analyze_content, detect_language, extract_dependencies
from .models import ClassInfo, FileAnalysis, FunctionInfo, InterfaceInfo
from .patterns import detect_patterns

__all__ = [
    "analyze_content",
    "detect_language",
    "extract_dependencies",
    "detect_patterns",
    "ClassInfo",
    "FileAnalysis",
    "FunctionInfo",
    "InterfaceInfo",
]
