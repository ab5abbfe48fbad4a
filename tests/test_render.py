import unittest

from pound.render import TAB_STOP, raw_to_render_col, render_line, render_to_raw_col


class TestRenderLine(unittest.TestCase):

    def test_tab_at_column_zero_expands_to_full_stop(self):
        self.assertEqual(render_line("\t"), " " * TAB_STOP)
        self.assertEqual(TAB_STOP, 8)

    def test_tab_expands_to_next_multiple(self):
        self.assertEqual(render_line("a\tb", 4), "a   b")
        self.assertEqual(render_line("abcd\tx", 4), "abcd    x")

    def test_plain_text_is_unchanged(self):
        self.assertEqual(render_line("let x = 1;"), "let x = 1;")
        self.assertEqual(render_line(""), "")

    def test_invalid_tab_stop(self):
        with self.assertRaises(ValueError):
            render_line("\t", 0)
        with self.assertRaises(ValueError):
            raw_to_render_col("\t", 1, -1)


class TestColumnMapping(unittest.TestCase):

    def test_raw_to_render(self):
        self.assertEqual(raw_to_render_col("a\tb", 2, 4), 4)
        self.assertEqual(raw_to_render_col("\t\tx", 2), 16)
        self.assertEqual(raw_to_render_col("abc", 2), 2)
        self.assertEqual(raw_to_render_col("abc", 0), 0)

    def test_render_inside_tab_maps_to_tab(self):
        # render columns 1..3 are the expanded tab
        for render_col in (1, 2, 3):
            self.assertEqual(render_to_raw_col("a\tb", render_col, 4), 1)
        self.assertEqual(render_to_raw_col("a\tb", 4, 4), 2)

    def test_past_end_of_line_maps_to_line_length(self):
        self.assertEqual(render_to_raw_col("abc", 3), 3)
        self.assertEqual(render_to_raw_col("abc", 10), 3)
        self.assertEqual(render_to_raw_col("a\t", 20, 4), 2)
        self.assertEqual(render_to_raw_col("", 5), 0)

    def test_round_trip_recovers_raw_column(self):
        for raw in ("plain text", "a\tb\tc", "\t\tindented", "x\t"):
            for tab_stop in (1, 4, 8):
                for col in range(len(raw) + 1):
                    render_col = raw_to_render_col(raw, col, tab_stop)
                    self.assertEqual(render_to_raw_col(raw, render_col, tab_stop), col,
                                     f"{raw!r} col {col} tab_stop {tab_stop}")


if __name__ == "__main__":
    unittest.main()
