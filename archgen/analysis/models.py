"""Pydantic models for per-file structural summaries."""

from pydantic import BaseModel, Field


class InterfaceInfo(BaseModel):
    """An interface declaration."""

    name: str
    extends: list[str] = Field(default_factory=list)
    methods: list[str] = Field(default_factory=list)
    properties: list[str] = Field(default_factory=list)


class ClassInfo(BaseModel):
    """A class declaration."""

    name: str
    parent: str | None = None
    implements: list[str] = Field(default_factory=list)
    methods: list[str] = Field(default_factory=list)
    properties: list[str] = Field(default_factory=list)
    patterns: list[str] = Field(default_factory=list)


class FunctionInfo(BaseModel):
    """A top-level function declaration."""

    name: str
    params: list[str] = Field(default_factory=list)
    return_type: str | None = None
    is_async: bool = False
    is_exported: bool = False


class FileAnalysis(BaseModel):
    """Best-effort structural summary of one source file."""

    module_name: str | None = None
    interfaces: list[InterfaceInfo] = Field(default_factory=list)
    classes: list[ClassInfo] = Field(default_factory=list)
    functions: list[FunctionInfo] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)
    patterns: list[str] = Field(default_factory=list)
