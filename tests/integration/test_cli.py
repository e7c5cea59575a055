"""Integration tests for the command-line interface."""

import json
import sys
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from archgen import cli
from archgen.cli import main
from archgen.enhance.providers import Completion

CLEAN_ENV = {
    "GITHUB_TOKEN": None,
    "AI_TYPE": None,
    "AI_API_KEY": None,
    "ANTHROPIC_API_KEY": None,
    "LOG_LEVEL": None,
}


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def _invoke(runner, args):
    return runner.invoke(main, args, env=CLEAN_ENV)


class TestGenerateCommand:
    def test_json_to_stdout(self, runner, sample_repo):
        result = _invoke(runner, ["generate", "-r", str(sample_repo), "-f", "json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert "src/services/userService.ts" in [n["id"] for n in data["nodes"]]

    def test_default_format_is_excalidraw(self, runner, sample_repo):
        result = _invoke(runner, ["generate", "-r", str(sample_repo)])

        assert result.exit_code == 0
        assert json.loads(result.output)["type"] == "excalidraw"

    def test_mermaid_to_file(self, runner, sample_repo, tmp_path):
        out = tmp_path / "out" / "diagram.mmd"

        result = _invoke(
            runner, ["generate", "-r", str(sample_repo), "-f", "mermaid", "-o", str(out)]
        )

        assert result.exit_code == 0
        assert out.read_text().startswith("graph TD")
        assert "Diagram exported" in result.output

    def test_exclude_patterns_replace_defaults(self, runner, sample_repo):
        result = _invoke(
            runner, ["generate", "-r", str(sample_repo), "-f", "json", "-e", "src", "-e", ".git"]
        )

        ids = [n["id"] for n in json.loads(result.output)["nodes"]]
        assert not any(i.startswith("src/") for i in ids)
        assert "node_modules/lib/index.js" in ids

    def test_deployment_type(self, runner, sample_repo):
        result = _invoke(
            runner, ["generate", "-r", str(sample_repo), "-f", "json", "-t", "deployment"]
        )

        assert json.loads(result.output)["metadata"]["type"] == "deployment"

    def test_remote_without_token_fails(self, runner):
        result = _invoke(runner, ["generate", "-r", "octocat/hello-world"])

        assert result.exit_code == 1
        assert "token" in result.output

    def test_png_requires_output(self, runner, sample_repo):
        result = _invoke(runner, ["generate", "-r", str(sample_repo), "-f", "png"])

        assert result.exit_code == 1
        assert "requires --output" in result.output

    def test_settings_file(self, runner, sample_repo, tmp_path):
        config = tmp_path / "archgen.yaml"
        config.write_text("exclude_patterns: [src, .git]\n")

        result = _invoke(
            runner, ["generate", "-r", str(sample_repo), "-f", "json", "--config", str(config)]
        )

        ids = [n["id"] for n in json.loads(result.output)["nodes"]]
        assert "dist/bundle.js" in ids
        assert not any(i.startswith("src/") for i in ids)

    def test_invalid_settings_file(self, runner, sample_repo, tmp_path):
        config = tmp_path / "bad.yaml"
        config.write_text("layout: spiral\n")

        result = _invoke(runner, ["generate", "-r", str(sample_repo), "--config", str(config)])

        assert result.exit_code == 1


class TestGenerateWithAI:
    def test_missing_key_continues_unenhanced(self, runner, sample_repo):
        result = _invoke(runner, ["generate", "-r", str(sample_repo), "-f", "json", "--enable-ai"])

        assert result.exit_code == 0
        assert "enhanced" not in json.loads(result.output)["metadata"]

    def test_enhancement_merges_nodes(self, runner, sample_repo):
        reply = '{"nodes": [{"id": "user-db", "type": "database"}], "edges": []}'
        with patch(
            "archgen.enhance.providers.ClaudeProvider.complete",
            return_value=Completion(content=reply),
        ):
            result = _invoke(
                runner,
                ["generate", "-r", str(sample_repo), "-f", "json", "--enable-ai", "--ai-api-key", "k"],
            )

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["nodes"][-1]["id"] == "user-db"
        assert data["metadata"]["enhanced"] is True
        assert data["metadata"]["ai_model"] == "claude-sonnet-4-20250514"

    def test_failed_enhancement_is_not_fatal(self, runner, sample_repo):
        with patch(
            "archgen.enhance.providers.ClaudeProvider.complete",
            return_value=Completion(content="not json"),
        ):
            result = _invoke(
                runner,
                ["generate", "-r", str(sample_repo), "-f", "json", "--enable-ai", "--ai-api-key", "k"],
            )

        assert result.exit_code == 0
        assert "enhanced" not in json.loads(result.output)["metadata"]

    def test_unknown_ai_type_fails(self, runner, sample_repo):
        result = _invoke(
            runner,
            ["generate", "-r", str(sample_repo), "--enable-ai", "--ai-type", "baidu", "--ai-api-key", "k"],
        )

        assert result.exit_code == 1
        assert "Unsupported AI type" in result.output


class TestInitCommand:
    def test_init_does_not_overwrite(self, runner, tmp_path):
        env_path = tmp_path / "config" / ".env"

        first = _invoke(runner, ["init", "--path", str(env_path)])
        assert first.exit_code == 0
        assert "created" in first.output

        env_path.write_text("GITHUB_TOKEN=mine\n")
        second = _invoke(runner, ["init", "--path", str(env_path)])

        assert second.exit_code == 0
        assert "already exists" in second.output
        assert env_path.read_text() == "GITHUB_TOKEN=mine\n"


class TestRunEntryPoint:
    def test_unexpected_error_exits_1(self, sample_repo, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        def boom(*args, **kwargs):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(cli, "generate_diagram", boom)
        monkeypatch.setattr(sys, "argv", ["archgen", "generate", "-r", str(sample_repo)])

        with pytest.raises(SystemExit) as exc_info:
            cli.run()
        assert exc_info.value.code == 1

    def test_usage_error_exits_1(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(sys, "argv", ["archgen", "generate"])

        with pytest.raises(SystemExit) as exc_info:
            cli.run()
        assert exc_info.value.code == 1
