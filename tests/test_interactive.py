"""Tests for the candidate selection prompt."""

from __future__ import annotations

import unittest
from unittest import mock

from gitgrove.interactive import build_choices, select_candidate

OPTIONS = [("github", "github.com/teamx/widget"), ("internal", "git.corp/teamx/widget")]


class SelectCandidateTests(unittest.TestCase):
    def test_choices_are_labelled_with_name_and_value(self) -> None:
        choices = build_choices(OPTIONS)

        self.assertEqual([choice.value for choice in choices], [0, 1])
        self.assertEqual(choices[0].name, "github    github.com/teamx/widget")
        self.assertEqual(choices[1].name, "internal  git.corp/teamx/widget")

    def test_no_tty_declines(self) -> None:
        with mock.patch("gitgrove.interactive.is_interactive", return_value=False):
            self.assertIsNone(select_candidate(OPTIONS))

    def test_selection_maps_back_to_value(self) -> None:
        prompt = mock.Mock()
        prompt.execute.return_value = 1
        with mock.patch("gitgrove.interactive.is_interactive", return_value=True), mock.patch(
            "gitgrove.interactive.inquirer.select", return_value=prompt
        ):
            self.assertEqual(select_candidate(OPTIONS), "git.corp/teamx/widget")

    def test_cancelled_prompt_declines(self) -> None:
        prompt = mock.Mock()
        prompt.execute.side_effect = KeyboardInterrupt
        with mock.patch("gitgrove.interactive.is_interactive", return_value=True), mock.patch(
            "gitgrove.interactive.inquirer.select", return_value=prompt
        ):
            self.assertIsNone(select_candidate(OPTIONS))


if __name__ == "__main__":
    unittest.main()
