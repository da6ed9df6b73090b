"""End-to-end tests for the Typer CLI."""

from __future__ import annotations

import json
import logging
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

from gitgrove import __version__
from gitgrove.cli import app, configure_logging
from gitgrove.fs import normalize_path


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp = normalize_path(tmp.name)
        self.root = self.tmp / "grove"
        self.root.mkdir()
        self.index_path = self.tmp / "index.json"
        config_path = self.tmp / "gitgrove.toml"
        config_path.write_text(
            "\n".join(
                [
                    "[clone]",
                    f'root = "{self.root}"',
                    "",
                    "[clone.sources]",
                    'internal = "git.corp/"',
                    "",
                    "[index]",
                    f'path = "{self.index_path}"',
                ]
            )
        )
        self.env = {"GITGROVE_CONFIG": str(config_path), "GITGROVE_ROOT": "", "GITGROVE_INDEX": ""}
        self.runner = CliRunner()
        self.addCleanup(self._reset_logging)

    @staticmethod
    def _reset_logging() -> None:
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)

    def invoke(self, *args: str):
        return self.runner.invoke(app, list(args), env=self.env)

    def make_clone(self, *parts: str) -> Path:
        path = self.root.joinpath(*parts)
        (path / ".git").mkdir(parents=True)
        return path

    def test_version(self) -> None:
        result = self.invoke("--version")

        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)

    def test_track_and_list(self) -> None:
        clone = self.make_clone("git.corp", "teamx", "widget")

        tracked = self.invoke("track", str(clone))
        listed = self.invoke("ls", "--json")

        self.assertEqual(tracked.exit_code, 0, tracked.output)
        self.assertIn(str(clone), tracked.stdout)
        self.assertEqual(listed.exit_code, 0, listed.output)
        payload = json.loads(listed.stdout)
        self.assertEqual([entry["path"] for entry in payload], [str(clone)])
        self.assertEqual(payload[0]["origin"], "track")

    def test_track_twice_fails(self) -> None:
        clone = self.make_clone("a")
        self.invoke("track", str(clone))

        result = self.invoke("track", str(clone))

        self.assertEqual(result.exit_code, 1)
        self.assertIn("already indexed", result.output)

    def test_table_listing(self) -> None:
        self.invoke("track", str(self.make_clone("a")))

        result = self.invoke("ls")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("track", result.output)

    def test_empty_listing(self) -> None:
        result = self.invoke("ls")

        self.assertEqual(result.exit_code, 0)
        self.assertIn("No clones indexed.", result.output)

    def test_find_reports_resolution_failures_with_exit_code_2(self) -> None:
        result = self.invoke("find", "teamx/widget")

        self.assertEqual(result.exit_code, 2)
        self.assertIn("teamx/widget", result.output)

    def test_find(self) -> None:
        clone = self.make_clone("git.corp", "teamx", "widget")
        self.invoke("track", str(clone))

        result = self.invoke("find", "teamx/widget")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn(str(clone), result.stdout)

    def test_move_with_target(self) -> None:
        clone = self.make_clone("old")
        self.invoke("track", str(clone))
        destination = self.root / "git.corp" / "teamx" / "widget"

        result = self.invoke("mv", str(clone), "--target", str(destination))

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(destination.is_dir())
        payload = json.loads(self.invoke("ls", "--json").stdout)
        self.assertEqual([entry["path"] for entry in payload], [str(destination)])

    def test_move_rejects_target_and_remote(self) -> None:
        clone = self.make_clone("old")

        result = self.invoke("mv", str(clone), "--target", str(self.root / "new"), "--remote", "origin")

        self.assertEqual(result.exit_code, 1)
        self.assertTrue(clone.exists())

    def test_remove_requires_confirmation_without_tty(self) -> None:
        clone = self.make_clone("a")
        self.invoke("track", str(clone))

        result = self.invoke("rm", str(clone))

        self.assertEqual(result.exit_code, 1)
        self.assertTrue(clone.exists())

    def test_remove(self) -> None:
        clone = self.make_clone("a")
        self.invoke("track", str(clone))

        result = self.invoke("rm", str(clone), "--yes")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertFalse(clone.exists())
        self.assertEqual(json.loads(self.invoke("ls", "--json").stdout), [])

    def test_clone_with_unknown_source(self) -> None:
        result = self.invoke("clone", "teamx/widget", "--source", "github")

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Unknown source", result.output)

    def test_sources(self) -> None:
        result = self.invoke("sources")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("internal", result.output)
        self.assertIn("git.corp/", result.output)

    def test_broken_config_fails_cleanly(self) -> None:
        broken = self.tmp / "broken.toml"
        broken.write_text("[clone\n")

        result = self.runner.invoke(app, ["--config", str(broken), "ls"], env=self.env)

        self.assertEqual(result.exit_code, 1)
        self.assertIn("Invalid TOML", result.output)

    def test_undecodable_index_fails_cleanly(self) -> None:
        self.index_path.write_bytes(b"\xff\xfe")

        result = self.invoke("ls")

        self.assertEqual(result.exit_code, 1)
        self.assertNotIsInstance(result.exception, UnicodeDecodeError)
        self.assertIn("Failed to read index", result.output)


class ConfigureLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.addCleanup(CliTests._reset_logging)

    def test_default_level_is_info(self) -> None:
        configure_logging(False)

        self.assertEqual(logging.getLogger().level, logging.INFO)

    def test_verbose_level_is_debug(self) -> None:
        configure_logging(True)

        self.assertEqual(logging.getLogger().level, logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
