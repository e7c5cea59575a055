"""Response parsing for diagram enhancement."""

import json
import re
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from ..graph.models import Edge, Node
from .errors import ResponseParseError

# Pattern to match a fenced code block, optionally tagged json
FENCED_BLOCK_PATTERN = re.compile(r"```(?:json|JSON)?\s*\n(.*?)```", re.DOTALL)


class EnhancedGraph(BaseModel):
    """The diagram portion of a model reply."""

    nodes: list[Node]
    edges: list[Edge]
    metadata: dict[str, Any] = Field(default_factory=dict)


def extract_json_object(text: str) -> dict:
    """Extract the first JSON object from free text.

    A fenced code block is tried first; otherwise decoding starts at the
    first opening brace.

    Args:
        text: The raw model reply.

    Returns:
        The decoded object.

    Raises:
        ResponseParseError: If no JSON object can be decoded.
    """
    for match in FENCED_BLOCK_PATTERN.finditer(text):
        block = match.group(1).strip()
        if not block.startswith("{"):
            continue
        try:
            data = json.loads(block)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data

    start = text.find("{")
    if start == -1:
        raise ResponseParseError("No JSON object found in response", raw_response=text)

    try:
        data, _ = json.JSONDecoder().raw_decode(text, start)
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"Invalid JSON in response: {e}", raw_response=text) from e

    if not isinstance(data, dict):
        raise ResponseParseError("Response JSON is not an object", raw_response=text)
    return data


def parse_enhancement_response(text: str) -> EnhancedGraph:
    """Parse a model reply into nodes and edges.

    Args:
        text: The raw model reply.

    Returns:
        The validated graph.

    Raises:
        ResponseParseError: If the reply holds no JSON object, lacks
            `nodes` or `edges`, or an element is missing its identity fields.
    """
    if not text or not text.strip():
        raise ResponseParseError("Empty response from model", raw_response=text)

    data = extract_json_object(text)

    for key in ("nodes", "edges"):
        if not isinstance(data.get(key), list):
            raise ResponseParseError(f"Response is missing a '{key}' list", raw_response=text)

    try:
        return EnhancedGraph.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ResponseParseError(
            f"Response failed validation: {errors}", raw_response=text
        ) from e
