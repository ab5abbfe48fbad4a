import curses
import os
import tempfile
import unittest
from unittest.mock import MagicMock, call, patch

from pound.config import default_config
from pound.editor import PoundEditor
from pound.highlight import HighlightTag
from pound.screen import (
    WELCOME_MESSAGE,
    DrawScreen,
    init_colors,
    string_width,
    truncate_string,
)


class TestDrawScreen(unittest.TestCase):

    def setUp(self):
        self.config = default_config()
        self.editor = PoundEditor(self.config, screen_size=(40, 12))
        self.window = MagicMock()

    def _addstr_texts(self):
        return [c.args[2] for c in self.window.addstr.call_args_list]

    def test_empty_buffer_shows_welcome_and_tildes(self):
        self.assertTrue(DrawScreen(self.editor, self.window).draw())

        welcome_row = self.editor.screen_rows // 3
        welcome_calls = [c for c in self.window.addstr.call_args_list if c.args[0] == welcome_row]
        self.assertEqual(len(welcome_calls), 1)
        line = welcome_calls[0].args[2]
        self.assertTrue(line.startswith("~"))
        self.assertTrue(line.endswith(WELCOME_MESSAGE))
        self.assertEqual(self._addstr_texts().count("~"), self.editor.screen_rows - 1)
        self.window.refresh.assert_called_once()

    def test_rows_are_painted_with_highlight_attributes(self):
        colors = {HighlightTag.KEYWORD: 42, HighlightTag.NUMBER: 7}
        with tempfile.TemporaryDirectory() as temp_dir:
            self.editor.open_file(os.path.join(temp_dir, "main.rs"))
        for ch in "let x = 1;":
            self.editor.insert_char(ch)

        DrawScreen(self.editor, self.window, colors).draw()

        self.window.addstr.assert_any_call(0, 0, "let", 42)
        self.window.addstr.assert_any_call(0, 3, " x = ", curses.A_NORMAL)
        self.window.addstr.assert_any_call(0, 8, "1", 7)
        self.assertNotIn(WELCOME_MESSAGE, "".join(self._addstr_texts()))

    def test_long_rows_are_clipped_to_screen_width(self):
        for ch in "x" * 60:
            self.editor.insert_char(ch)
        self.editor.cursor.set_position(0, 0)
        DrawScreen(self.editor, self.window).draw()
        self.window.addstr.assert_any_call(0, 0, "x" * 40, curses.A_NORMAL)

    def test_status_and_message_bars(self):
        DrawScreen(self.editor, self.window).draw()
        rows, columns = self.editor.screen_rows, self.editor.screen_columns

        status = [c for c in self.window.addstr.call_args_list if c.args[0] == rows]
        self.assertEqual(len(status), 1)
        text, attr = status[0].args[2], status[0].args[3]
        self.assertEqual(len(text), columns)
        self.assertTrue(text.startswith("[No Name]"))
        self.assertTrue(text.endswith("no ft | 1/0"))
        self.assertEqual(attr, curses.A_REVERSE)

        message = [c for c in self.window.addstr.call_args_list if c.args[0] == rows + 1]
        self.assertEqual(message[0].args[2],
                         truncate_string(self.config["editor"]["help_message"], columns - 1))

    def test_cursor_is_positioned_last(self):
        for ch in "\tab":
            self.editor.insert_char(ch)
        DrawScreen(self.editor, self.window).draw()
        self.assertEqual(self.window.move.call_args, call(0, 10))

    def test_curses_error_is_reported(self):
        self.window.addstr.side_effect = curses.error("boom")
        self.assertFalse(DrawScreen(self.editor, self.window).draw())
        self.assertTrue(self.editor.status.message().startswith("Draw error"))


class TestWidthHelpers(unittest.TestCase):

    def test_wide_characters(self):
        self.assertEqual(string_width("你好"), 4)
        self.assertEqual(truncate_string("你好abc", 3), "你")
        self.assertEqual(truncate_string("abc", 10), "abc")
        self.assertEqual(truncate_string("abc", 0), "")


class TestInitColors(unittest.TestCase):

    @patch("curses.has_colors", return_value=False)
    def test_monochrome_terminal(self, mock_has_colors):
        colors = init_colors(default_config())
        self.assertEqual(colors[HighlightTag.KEYWORD], curses.A_NORMAL)
        self.assertEqual(colors[HighlightTag.SEARCH_MATCH], curses.A_REVERSE)

    @patch("curses.color_pair", side_effect=lambda n: n << 8)
    @patch("curses.init_pair")
    @patch("curses.use_default_colors")
    @patch("curses.start_color")
    @patch("curses.has_colors", return_value=True)
    def test_color_terminal(self, mock_has_colors, mock_start, mock_default, mock_init_pair, mock_color_pair):
        config = default_config()
        config["colors"]["number"] = "not-a-color"
        colors = init_colors(config)

        mock_start.assert_called_once()
        self.assertEqual(set(colors), set(HighlightTag))
        pairs = {c.args[0]: c.args[1] for c in mock_init_pair.call_args_list}
        keyword_pair = list(HighlightTag).index(HighlightTag.KEYWORD) + 1
        number_pair = list(HighlightTag).index(HighlightTag.NUMBER) + 1
        self.assertEqual(pairs[keyword_pair], curses.COLOR_YELLOW)
        self.assertEqual(pairs[number_pair], -1)
        self.assertEqual(colors[HighlightTag.KEYWORD], keyword_pair << 8)


if __name__ == "__main__":
    unittest.main()
