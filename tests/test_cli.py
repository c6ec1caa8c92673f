"""
Test cases for CLI commands.

Tests cover:
- follow command (backlog read, JSON output, config file)
- sniff command
- Error handling
"""
from __future__ import annotations
import json
from typer.testing import CliRunner
from tailfollow.cli import app

runner = CliRunner()


class TestFollowCommand:
    def test_from_start_json(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_bytes(b"first\nsecond\n")

        result = runner.invoke(app, [
            "follow",
            "--file", str(log),
            "--from-start",
            "--json",
            "--poll", "0.01",
            "--max-lines", "2",
        ])

        assert result.exit_code == 0, f"follow command failed: {result.output}"
        records = [json.loads(l) for l in result.stdout.splitlines() if l.startswith("{")]
        assert [r["line"] for r in records] == ["first", "second"]
        assert all(r["file"] == str(log) for r in records)

    def test_config_file(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_bytes(b"a\r\nb\r\nc\r\n")
        cfg = tmp_path / "follow.yaml"
        cfg.write_text("follow:\n  start_offset: 3\n  poll_interval: 0.01\n")

        result = runner.invoke(app, [
            "follow",
            "--file", str(log),
            "--config", str(cfg),
            "--max-lines", "2",
        ])

        assert result.exit_code == 0, f"follow command failed: {result.output}"
        assert "b" in result.stdout
        assert "c" in result.stdout
        assert "\r" not in result.stdout

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["follow", "--file", str(tmp_path / "missing.log")])
        assert result.exit_code == 1

    def test_missing_config(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_bytes(b"")
        result = runner.invoke(app, [
            "follow", "--file", str(log), "--config", str(tmp_path / "nope.yaml"),
        ])
        assert result.exit_code == 1

    def test_invalid_config(self, tmp_path):
        log = tmp_path / "app.log"
        log.write_bytes(b"")
        cfg = tmp_path / "follow.yaml"
        cfg.write_text("follow:\n  persistent: maybe\n")
        result = runner.invoke(app, ["follow", "--file", str(log), "--config", str(cfg)])
        assert result.exit_code == 1

    def test_directory_is_rejected(self, tmp_path):
        result = runner.invoke(app, ["follow", "--file", str(tmp_path), "--json"])
        assert result.exit_code == 1


class TestSniffCommand:
    def test_crlf(self, tmp_path):
        p = tmp_path / "dos.txt"
        p.write_bytes(b"x\r\ny\r\n")
        result = runner.invoke(app, ["sniff", "--file", str(p)])
        assert result.exit_code == 0
        assert "CRLF" in result.stdout

    def test_lf(self, tmp_path):
        p = tmp_path / "unix.txt"
        p.write_bytes(b"x\ny\n")
        result = runner.invoke(app, ["sniff", "--file", str(p)])
        assert result.exit_code == 0
        assert result.stdout.strip() == "LF"

    def test_sample_size(self, tmp_path):
        p = tmp_path / "late.txt"
        p.write_bytes(b"a\n" * 10 + b"b\r\n")
        result = runner.invoke(app, ["sniff", "--file", str(p), "--bytes", "8"])
        assert result.stdout.strip() == "LF"

    def test_missing(self, tmp_path):
        result = runner.invoke(app, ["sniff", "--file", str(tmp_path / "none.txt")])
        assert result.exit_code == 1
