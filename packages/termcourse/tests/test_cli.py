"""Tests for termcourse.cli"""
import json

import pytest
from typer.testing import CliRunner

from termcourse import cli
from termcourse.ansi import visible_width
from termcourse.preview.backends import RendererBackend

runner = CliRunner()


@pytest.fixture
def topic_file(tmp_path):
    path = tmp_path / "topic.json"
    path.write_text(
        json.dumps(
            {
                "id": 9,
                "title": "Hello terminal",
                "post_stream": {
                    "posts": [
                        {"id": 1, "username": "alice", "raw": "first post", "post_number": 1},
                        {"id": 2, "username": "bob", "raw": "second post", "post_number": 2},
                    ]
                },
            }
        )
    )
    return path


class TestFrame:
    def test_renders_exact_screen(self, topic_file):
        result = runner.invoke(cli.app, ["frame", str(topic_file), "--width", "50", "--height", "14"])
        assert result.exit_code == 0, result.output
        rows = result.output.split("\n")[:-1]
        assert len(rows) == 14
        assert all(visible_width(row) == 50 for row in rows)
        assert "Topic: Hello terminal" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(cli.app, ["frame", str(tmp_path / "missing.json")])
        assert result.exit_code == 1


class TestTopics:
    def test_renders_list(self, tmp_path):
        path = tmp_path / "latest.json"
        path.write_text(json.dumps({"topic_list": {"topics": [{"id": 1, "title": "Alpha", "posts_count": 3}]}}))
        result = runner.invoke(cli.app, ["topics", str(path), "--width", "60", "--height", "8"])
        assert result.exit_code == 0, result.output
        assert "Alpha  (2 replies)" in result.output


class TestPreview:
    def test_backend_off(self):
        result = runner.invoke(cli.app, ["preview", "https://cdn.example.com/a.png", "--backend", "off"])
        assert result.exit_code == 1
        assert "disabled" in result.output

    def test_unknown_mode(self):
        result = runner.invoke(cli.app, ["preview", "https://cdn.example.com/a.png", "--mode", "sixel"])
        assert result.exit_code == 1

    def test_prints_preview(self, monkeypatch):
        class StubPipeline:
            enabled = True

            def preview(self, url, width, max_lines):
                return ["line one", "line two"]

            def close(self):
                pass

        monkeypatch.setattr(cli.ImagePreviewPipeline, "from_settings", classmethod(lambda cls, s: StubPipeline()))
        result = runner.invoke(cli.app, ["preview", "https://cdn.example.com/a.png"])
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == ["line one", "line two"]


class TestBackends:
    def test_table(self, monkeypatch):
        monkeypatch.setattr(RendererBackend, "is_available", lambda self: self.name == "chafa")
        result = runner.invoke(cli.app, ["backends"])
        assert result.exit_code == 0
        assert "chafa" in result.output
        assert "viu" in result.output
