"""Prompt templates for diagram enhancement."""

import json

import yaml

from ..graph.models import Diagram
from ..source.models import RepoInfo

SYSTEM_PROMPT = """You are an experienced software architect who extracts high-quality architecture diagrams from code structure and type definitions.

You will receive repository information and a diagram produced by static heuristics. Return an improved diagram.

Format your response as a single JSON object and nothing else:
{
  "nodes": [{"id": "...", "label": "...", "type": "...", "metadata": {}}],
  "edges": [{"id": "...", "source": "...", "target": "...", "type": "...", "label": "..."}],
  "metadata": {"generated_at": "...", "version": "1.0.0", "method": "...", "summary": "..."}
}

Important:
- Keep the ids of existing nodes and edges unchanged
- Every node and edge id must be unique
- Node types: module, service, component, database, external, interface, class, function, controller, repository, model, util, config, domain
- Edge types: depends, uses, implements, extends, contains, calls
- Every relationship you describe must have a corresponding edge"""


def build_enhancement_prompt(
    diagram: Diagram,
    repo_info: RepoInfo | None = None,
    context: str = "",
) -> str:
    """Build the enhancement prompt with repository info and the diagram.

    Args:
        diagram: The diagram to enhance.
        repo_info: Descriptive repository metadata; defaults apply when None.
        context: Free-text note appended to the prompt.

    Returns:
        The prompt string.
    """
    repo_info = repo_info or RepoInfo(name=diagram.metadata.repository or "unknown")
    repo_json = json.dumps(repo_info.model_dump(), indent=2)

    diagram_dict = _clean_dict(diagram.model_dump(mode="json", exclude_none=True))
    diagram_yaml = yaml.dump(diagram_dict, default_flow_style=False, sort_keys=False)

    return f"""Please analyze this {diagram.metadata.type.value} architecture diagram and enhance it.

Organize the system into clear layers (core, application, interface, infrastructure, external).
Add components and relationships that logically exist but are missing, improve names and
descriptions, and record component responsibilities and design patterns in metadata.

### Repository
```json
{repo_json}
```

### Current diagram
```yaml
{diagram_yaml}```

### Additional context
{context or "(none)"}

Return only the enhanced diagram as JSON."""


def _clean_dict(data: dict) -> dict:
    """Remove empty lists and dicts for a more compact prompt."""
    if not isinstance(data, dict):
        return data

    cleaned = {}
    for key, value in data.items():
        if isinstance(value, dict):
            cleaned_value = _clean_dict(value)
            if cleaned_value:
                cleaned[key] = cleaned_value
        elif isinstance(value, list):
            cleaned_list = [
                _clean_dict(item) if isinstance(item, dict) else item for item in value
            ]
            cleaned_list = [item for item in cleaned_list if item not in ({}, [], None)]
            if cleaned_list:
                cleaned[key] = cleaned_list
        elif value is not None:
            cleaned[key] = value

    return cleaned
