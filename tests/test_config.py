"""Tests for configuration loading."""

from __future__ import annotations

import os
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest import mock

from gitgrove.config import DEFAULT_SOURCES, load_config
from gitgrove.exceptions import ConfigError
from gitgrove.fs import normalize_path

_ENV_VARS = ("GITGROVE_CONFIG", "GITGROVE_ROOT", "GITGROVE_INDEX", "GOPATH")


class LoadConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp = Path(tmp.name)
        self.config_path = self.tmp / "gitgrove.toml"
        patcher = mock.patch.dict(os.environ, {}, clear=False)
        patcher.start()
        self.addCleanup(patcher.stop)
        for var in _ENV_VARS:
            os.environ.pop(var, None)

    def write(self, text: str) -> None:
        self.config_path.write_text(textwrap.dedent(text))

    def test_reads_file(self) -> None:
        self.write(
            f"""
            [clone]
            root = "{self.tmp / 'grove'}"

            [clone.sources]
            github = "git@github.com:*.git"
            internal = "git.corp/"

            [index]
            path = "{self.tmp / 'index.json'}"
            """
        )

        config = load_config(self.config_path)

        self.assertEqual(config.root, normalize_path(self.tmp / "grove"))
        self.assertEqual(config.index_path, normalize_path(self.tmp / "index.json"))
        self.assertEqual(config.sources, {"github": "git@github.com:*.git", "internal": "git.corp/"})

    def test_config_path_from_environment(self) -> None:
        self.write(
            """
            [clone.sources]
            internal = "git.corp/"
            """
        )
        os.environ["GITGROVE_CONFIG"] = str(self.config_path)

        self.assertEqual(load_config().sources, {"internal": "git.corp/"})

    def test_environment_overrides_file(self) -> None:
        self.write(
            """
            [clone]
            root = "/from/file"
            """
        )
        os.environ["GITGROVE_ROOT"] = str(self.tmp / "env-root")
        os.environ["GITGROVE_INDEX"] = str(self.tmp / "env-index.json")
        os.environ["GOPATH"] = os.pathsep.join([str(self.tmp / "go1"), str(self.tmp / "go2")])

        config = load_config(self.config_path)

        self.assertEqual(config.root, normalize_path(self.tmp / "env-root"))
        self.assertEqual(config.index_path, normalize_path(self.tmp / "env-index.json"))
        self.assertEqual(config.gopath, normalize_path(self.tmp / "go1"))

    def test_missing_file_uses_defaults(self) -> None:
        config = load_config(self.tmp / "absent.toml")

        self.assertEqual(config.sources, DEFAULT_SOURCES)
        self.assertEqual(config.root, normalize_path("~/grove"))
        self.assertEqual(config.gopath, normalize_path("~/go"))

    def test_invalid_toml(self) -> None:
        self.write("[clone\nroot = 1")

        with self.assertRaises(ConfigError):
            load_config(self.config_path)

    def test_invalid_values(self) -> None:
        for text in (
            "clone = 3",
            "[clone]\nsources = 'github'",
            "[clone.sources]\ngithub = 1",
            "[clone.sources]\ngithub = ''",
            "[clone]\nroot = 5",
        ):
            with self.subTest(text=text):
                self.config_path.write_text(text)
                with self.assertRaises(ConfigError):
                    load_config(self.config_path)


if __name__ == "__main__":
    unittest.main()
