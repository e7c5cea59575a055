"""Renderers for finished diagrams."""

from .excalidraw import render_excalidraw
from .formatter import FORMATS, render, render_json, write_output
from .image import render_png, render_svg
from .mermaid import render_mermaid

__all__ = [
    "FORMATS",
    "render",
    "render_excalidraw",
    "render_json",
    "render_mermaid",
    "render_png",
    "render_svg",
    "write_output",
]
