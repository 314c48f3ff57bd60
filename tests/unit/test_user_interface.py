"""
Unit tests for the interactive prompts and the result summary.
"""

import io
import shutil
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

from lazy_shrink.core.modules.interface.user_interface import (
    display_search_summary, input_prompt, prompt_number, prompt_user_confirmation,
)
from lazy_shrink.core.modules.processing.file_manager import FindType

INPUT = 'builtins.input'


class TestPromptNumber(unittest.TestCase):

    @patch(INPUT, side_effect=["500"])
    def test_accepts_value_in_range(self, _mock_input):
        with redirect_stdout(io.StringIO()) as out:
            self.assertEqual(prompt_number((128, 2**32), "Choose a value", 1000), 500)
        self.assertIn(f"[128:{2**32 - 1}] (default: 1000)", out.getvalue())

    @patch(INPUT, side_effect=["abc"])
    def test_unparsable_returns_default(self, _mock_input):
        with redirect_stdout(io.StringIO()) as out:
            self.assertEqual(prompt_number((8, 16384), "Iterations", 256), 256)
        self.assertIn("256", out.getvalue())

    @patch(INPUT, side_effect=["", "12"])
    def test_unparsable_without_default_reprompts(self, mock_input):
        with redirect_stdout(io.StringIO()):
            self.assertEqual(prompt_number((0, 20)), 12)
        self.assertEqual(mock_input.call_count, 2)

    @patch(INPUT, side_effect=["7", "16384", "9"])
    def test_out_of_range_reprompts_even_with_default(self, mock_input):
        with redirect_stdout(io.StringIO()):
            self.assertEqual(prompt_number((8, 16384), "Iterations", 256), 9)
        self.assertEqual(mock_input.call_count, 3)

    @patch(INPUT, side_effect=EOFError)
    def test_closed_stdin_returns_default(self, _mock_input):
        with redirect_stdout(io.StringIO()):
            self.assertEqual(prompt_number((8, 16384), "Iterations", 256), 256)

    @patch(INPUT, side_effect=EOFError)
    def test_closed_stdin_without_default_raises(self, _mock_input):
        with self.assertRaises(ValueError):
            prompt_number((0, 5))


class TestInputPrompt(unittest.TestCase):

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    @patch(INPUT, side_effect=["1"])
    def test_pick_by_index(self, _mock_input):
        for name in ("a.png", "b.gif", "c.jpg"):
            (self.test_dir / name).write_bytes(b"x")

        with redirect_stdout(io.StringIO()) as out:
            chosen = input_prompt(self.test_dir, FindType.FILE, "Please select an image: ")

        self.assertEqual(chosen.name, "b.gif")
        self.assertIn("0: ", out.getvalue())
        self.assertIn("2: ", out.getvalue())

    def test_empty_directory(self):
        with self.assertRaises(ValueError):
            input_prompt(self.test_dir)


class TestConfirmation(unittest.TestCase):

    def test_auto_yes(self):
        with redirect_stdout(io.StringIO()):
            self.assertTrue(prompt_user_confirmation("Overwrite?", auto_yes=True))

    @patch(INPUT, side_effect=["maybe", "y"])
    def test_reprompts_until_answer(self, _mock_input):
        with redirect_stdout(io.StringIO()):
            self.assertTrue(prompt_user_confirmation("Overwrite?"))

    @patch(INPUT, side_effect=[""])
    def test_empty_means_no(self, _mock_input):
        self.assertFalse(prompt_user_confirmation("Overwrite?"))

    @patch(INPUT, side_effect=EOFError)
    def test_closed_stdin_means_no(self, _mock_input):
        self.assertFalse(prompt_user_confirmation("Overwrite?"))


class TestSummary(unittest.TestCase):

    def test_summary_reports_requested_and_achieved(self):
        result = SimpleNamespace(dimensions=(320, 200), within_target=True, iterations=14,
                                 stop_reason="within byte tolerance", target=50000, size=49800,
                                 scale=0.5, frame_count=1)
        with redirect_stdout(io.StringIO()) as out:
            display_search_summary(result, Path("out/cat_49KB.png"), 1.25)

        text = out.getvalue()
        self.assertIn("50000 bytes", text)
        self.assertIn("49800 bytes, within target", text)
        self.assertIn("320x200", text)
        self.assertIn("cat_49KB.png", text)
        self.assertIn("Finished in: 1250ms!", text)


if __name__ == '__main__':
    unittest.main()
