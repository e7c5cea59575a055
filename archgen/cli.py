"""Command-line interface for archgen."""

import logging
import os
import sys

import click

from .config import DEFAULT_ENV_PATH, Settings, load_environment, load_settings, write_env_template
from .errors import ArchgenError, ConfigurationError
from .graph.generator import GeneratorOptions, describe_repository, generate_diagram
from .graph.models import Diagram
from .graph.node_types import DiagramType
from .output.excalidraw import LAYOUTS
from .output.formatter import FORMATS, render, write_output

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Send log records to stderr at the given level name."""
    resolved = logging.getLevelName((level or "WARNING").upper())
    if not isinstance(resolved, int):
        resolved = logging.WARNING
    logging.basicConfig(level=resolved, format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger().setLevel(resolved)


@click.group()
@click.version_option(package_name="archgen")
def main():
    """archgen: architecture diagrams from source repositories."""
    load_environment()
    configure_logging(os.environ.get("LOG_LEVEL"))


@main.command()
@click.option(
    "-r",
    "--repository",
    required=True,
    help="Local directory, owner/repo or GitHub URL",
)
@click.option(
    "-t",
    "--type",
    "diagram_type",
    type=click.Choice([t.value for t in DiagramType]),
    default=DiagramType.FUNCTIONAL.value,
    help="Diagram type",
)
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice(FORMATS),
    default="excalidraw",
    help="Output format",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    default=None,
    help="Output file path (defaults to stdout)",
)
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    help="GitHub token (defaults to GITHUB_TOKEN env var)",
)
@click.option("--branch", default=None, help="Branch or ref for remote repositories")
@click.option(
    "-e",
    "--exclude",
    "exclude_patterns",
    multiple=True,
    help="Exclusion substring or regex; repeatable, replaces the defaults",
)
@click.option(
    "--layout",
    type=click.Choice(LAYOUTS),
    default=None,
    help="Excalidraw layout",
)
@click.option("--enable-ai", is_flag=True, default=False, help="Enable AI enhancement")
@click.option(
    "--ai-type",
    envvar="AI_TYPE",
    default=None,
    help="AI provider: claude, gpt or aliyun (defaults to AI_TYPE env var)",
)
@click.option(
    "--ai-api-key",
    envvar="AI_API_KEY",
    default=None,
    help="AI API key (defaults to AI_API_KEY env var)",
)
@click.option("--ai-model", default=None, help="Model name for the AI provider")
@click.option("--ai-timeout", type=float, default=None, help="AI request timeout in seconds")
@click.option("--context", default=None, help="Extra context for the AI prompt")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Settings file (defaults to ./archgen.yaml when present)",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Enable debug logging")
def generate(
    repository: str,
    diagram_type: str,
    output_format: str,
    output: str | None,
    token: str | None,
    branch: str | None,
    exclude_patterns: tuple[str, ...],
    layout: str | None,
    enable_ai: bool,
    ai_type: str | None,
    ai_api_key: str | None,
    ai_model: str | None,
    ai_timeout: float | None,
    context: str | None,
    config_path: str | None,
    verbose: bool,
):
    """Generate an architecture diagram.

    Exit codes:
      0 - Diagram generated
      1 - Configuration, source or rendering error
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = load_settings(config_path)

        if output_format == "png" and not output:
            raise ConfigurationError("PNG output requires --output")

        options = GeneratorOptions(
            token=token,
            branch=branch or settings.branch,
            exclude_patterns=list(exclude_patterns) or settings.exclude_patterns,
        )
        diagram = generate_diagram(repository, DiagramType(diagram_type), options)

        if enable_ai:
            diagram = _enhance(
                diagram,
                repository,
                options,
                settings,
                ai_type=ai_type,
                ai_api_key=ai_api_key,
                ai_model=ai_model,
                ai_timeout=ai_timeout,
                context=context,
            )

        data = render(diagram, output_format, layout or settings.layout)  # type: ignore

        if output:
            path = write_output(data, output)
            click.echo(f"Diagram exported to {path}", err=True)
        else:
            click.echo(data)

    except ArchgenError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _enhance(
    diagram: Diagram,
    repository: str,
    options: GeneratorOptions,
    settings: Settings,
    ai_type: str | None,
    ai_api_key: str | None,
    ai_model: str | None,
    ai_timeout: float | None,
    context: str | None,
) -> Diagram:
    """Run AI enhancement, continuing unenhanced when no key is configured."""
    from .enhance import APIKeyMissingError, ProviderKind, create_provider, enhance_diagram

    kind = ai_type or settings.ai_type or ProviderKind.CLAUDE.value
    try:
        provider = create_provider(
            kind,
            api_key=ai_api_key,
            model=ai_model or settings.ai_model,
            timeout=ai_timeout or settings.ai_timeout,
        )
    except APIKeyMissingError as e:
        logger.warning("%s AI enhancement will be disabled.", e)
        return diagram
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    logger.info("Enhancing diagram with %s (%s)", kind, provider.model)
    repo_info = describe_repository(repository, diagram, options)
    return enhance_diagram(diagram, provider, repo_info, context or settings.context)


@main.command()
@click.option(
    "--path",
    "env_path",
    type=click.Path(dir_okay=False),
    default=DEFAULT_ENV_PATH,
    help="Where to write the environment file",
)
def init(env_path: str):
    """Write a template .env file if none exists."""
    if write_env_template(env_path):
        click.echo(f"Configuration file created at {env_path}")
    else:
        click.echo(f"Configuration file already exists: {env_path}")


def run():
    """Console entry point; every failure exits with status 1."""
    try:
        main(standalone_mode=False)
    except click.exceptions.Abort:
        click.echo("Aborted!", err=True)
        sys.exit(1)
    except click.ClickException as e:
        e.show()
        sys.exit(1)
    except Exception:
        logger.exception("Unexpected error")
        sys.exit(1)


if __name__ == "__main__":
    run()
