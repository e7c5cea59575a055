"""Environment and settings-file configuration."""

import logging
from pathlib import Path
from typing import Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigurationError
from .source.walker import DEFAULT_EXCLUDE_PATTERNS

logger = logging.getLogger(__name__)

DEFAULT_ENV_PATH = ".env"
DEFAULT_SETTINGS_FILE = "archgen.yaml"

ENV_TEMPLATE = """# GitHub configuration
GITHUB_TOKEN=your_github_token_here

# AI configuration (claude, gpt or aliyun)
AI_TYPE=aliyun
AI_API_KEY=your_ai_api_key_here

# Logging
LOG_LEVEL=WARNING
"""


class Settings(BaseModel):
    """Defaults read from an archgen.yaml file.

    Command-line flags override every field.
    """

    exclude_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    branch: str = "main"
    layout: Literal["layered", "levels"] = "layered"
    ai_type: str | None = None
    ai_model: str | None = None
    ai_timeout: float = 300.0
    context: str = ""


def load_environment(path: str | Path | None = None) -> bool:
    """Load a .env file into the process environment.

    Variables already set in the environment are not overridden.

    Returns:
        True if a file was found and loaded.
    """
    path = Path(path or DEFAULT_ENV_PATH)
    if not path.is_file():
        logger.debug("No %s file found, using system environment variables", path)
        return False

    load_dotenv(path, override=False)
    logger.debug("Loaded environment variables from %s", path)
    return True


def write_env_template(path: str | Path = DEFAULT_ENV_PATH) -> bool:
    """Write the environment template unless the file already exists.

    Args:
        path: Destination of the env file.

    Returns:
        True if the file was written, False if it already existed.
    """
    path = Path(path)
    if path.exists():
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(ENV_TEMPLATE, encoding="utf-8")
    return True


def load_settings(path: str | Path | None = None) -> Settings:
    """Load settings from a YAML file.

    With no explicit path, archgen.yaml in the working directory is used
    when present; otherwise defaults are returned.

    Args:
        path: Explicit settings file.

    Returns:
        The parsed settings.

    Raises:
        ConfigurationError: If an explicit file is missing, or any file is
            not valid YAML or fails validation.
    """
    if path is None:
        path = Path(DEFAULT_SETTINGS_FILE)
        if not path.is_file():
            return Settings()
    path = Path(path)

    if not path.is_file():
        raise ConfigurationError(f"Settings file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e

    if data is None:
        return Settings()

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected YAML mapping at root of {path}, got {type(data).__name__}"
        )

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        errors = "; ".join(
            f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ConfigurationError(f"Invalid settings in {path}: {errors}") from e
