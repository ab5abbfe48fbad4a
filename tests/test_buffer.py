import os
import tempfile
import unittest

from pound.buffer import (
    READ_ONLY_MESSAGE,
    EditMode,
    FileType,
    TextBuffer,
    detect_encoding,
    split_lines,
)
from pound.errors import NoFileNameError
from pound.highlight import HighlightTag


def assert_lengths_consistent(test, buffer):
    for at, row in enumerate(buffer.rows):
        test.assertEqual(len(row.render), len(row.highlight), f"row {at}: {row!r}")


class TestTextBufferEditing(unittest.TestCase):

    def test_empty_buffer(self):
        buffer = TextBuffer()
        self.assertEqual(buffer.number_of_rows(), 0)
        self.assertIsNone(buffer.filename)
        self.assertIs(buffer.edit_mode, EditMode.EDITABLE)
        self.assertEqual(buffer.dirty, 0)

    def test_insert_tab_into_empty_row(self):
        buffer = TextBuffer.from_lines([""])
        position = buffer.insert_char(0, 0, "\t")
        self.assertEqual(position, (0, 1))
        self.assertEqual(buffer.get_render(0), " " * 8)
        self.assertEqual(len(buffer.get_editor_row(0).highlight), 8)

    def test_insert_past_last_row_appends_row(self):
        buffer = TextBuffer()
        self.assertEqual(buffer.insert_char(0, 0, "a"), (0, 1))
        self.assertEqual(buffer.get_row(0), "a")
        self.assertEqual(buffer.dirty, 2)

    def test_insert_char_rejects_newlines(self):
        buffer = TextBuffer.from_lines(["x"])
        with self.assertRaises(ValueError):
            buffer.insert_char(0, 0, "\n")
        with self.assertRaises(ValueError):
            buffer.insert_char(0, 0, "ab")

    def test_lines_with_newlines_are_rejected(self):
        with self.assertRaises(ValueError):
            TextBuffer(["a\nb"])

    def test_backspace_at_column_zero_joins_rows(self):
        buffer = TextBuffer.from_lines(["ab", "cd"])
        self.assertEqual(buffer.delete_char(1, 0), (0, 2))
        self.assertEqual(buffer.number_of_rows(), 1)
        self.assertEqual(buffer.get_row(0), "abcd")
        self.assertEqual(buffer.dirty, 1)

    def test_backspace_inside_row(self):
        buffer = TextBuffer.from_lines(["abc"])
        self.assertEqual(buffer.delete_char(0, 2), (0, 1))
        self.assertEqual(buffer.get_row(0), "ac")

    def test_backspace_at_buffer_start_is_noop(self):
        buffer = TextBuffer.from_lines(["abc"])
        self.assertEqual(buffer.delete_char(0, 0), (0, 0))
        self.assertEqual(buffer.delete_char(1, 0), (1, 0))
        self.assertEqual(buffer.get_row(0), "abc")
        self.assertEqual(buffer.dirty, 0)

    def test_newline_splits_row(self):
        buffer = TextBuffer.from_lines(["hello"])
        self.assertEqual(buffer.insert_newline(0, 2), (1, 0))
        self.assertEqual([buffer.get_row(0), buffer.get_row(1)], ["he", "llo"])
        self.assertEqual(buffer.dirty, 1)

    def test_newline_at_column_zero_inserts_row_before(self):
        buffer = TextBuffer.from_lines(["ab"])
        self.assertEqual(buffer.insert_newline(0, 0), (1, 0))
        self.assertEqual([buffer.get_row(0), buffer.get_row(1)], ["", "ab"])

    def test_split_inside_comment_keeps_cascade_consistent(self):
        buffer = TextBuffer.from_lines(["/* a b */", "int x;"], filename="x.c")
        buffer.insert_newline(0, 4)
        self.assertEqual(buffer.get_row(0), "/* a")
        self.assertTrue(buffer.get_editor_row(0).continues_comment)
        self.assertFalse(buffer.get_editor_row(1).continues_comment)
        self.assertEqual(buffer.get_editor_row(2).highlight[:3], [HighlightTag.TYPE] * 3)

        buffer.delete_char(1, 0)
        self.assertEqual(buffer.get_row(0), "/* a b */")
        self.assertFalse(buffer.get_editor_row(0).continues_comment)
        self.assertEqual(buffer.get_editor_row(1).highlight[:3], [HighlightTag.TYPE] * 3)

    def test_length_invariant_after_mixed_edits(self):
        buffer = TextBuffer.from_lines(["fn main() {", "\tlet s = \"/*\";", "}"], filename="main.rs")
        row, col = buffer.insert_char(0, 0, "/")
        row, col = buffer.insert_char(row, col, "*")
        assert_lengths_consistent(self, buffer)
        row, col = buffer.insert_newline(1, 3)
        row, col = buffer.insert_char(row, col, "\t")
        assert_lengths_consistent(self, buffer)
        buffer.delete_char(row, 0)
        buffer.delete_char(0, 2)
        buffer.delete_char(0, 1)
        assert_lengths_consistent(self, buffer)
        self.assertEqual(buffer.get_row(0), "fn main() {")
        self.assertFalse(any(r.continues_comment for r in buffer.rows))

    def test_visible_slice(self):
        buffer = TextBuffer.from_lines(["\thello"])
        text, tags = buffer.visible_slice(0, 8, 3)
        self.assertEqual(text, "hel")
        self.assertEqual(tags, [HighlightTag.NORMAL] * 3)
        self.assertEqual(buffer.visible_slice(0, 40, 10), ("", []))

    def test_row_length_past_end(self):
        buffer = TextBuffer.from_lines(["abc"])
        self.assertEqual(buffer.row_length(0), 3)
        self.assertEqual(buffer.row_length(1), 0)


class TestReadOnlyBuffer(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        for name in ("b.txt", "a.rs"):
            with open(os.path.join(self.temp_dir.name, name), "w") as fh:
                fh.write("x")
        self.buffer = TextBuffer.from_directory(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_listing(self):
        self.assertIs(self.buffer.file_type, FileType.DIRECTORY)
        self.assertTrue(self.buffer.read_only)
        self.assertIsNone(self.buffer.filename)
        self.assertEqual(
            [self.buffer.get_row(0), self.buffer.get_row(1)],
            [os.path.join(self.temp_dir.name, "a.rs"), os.path.join(self.temp_dir.name, "b.txt")],
        )

    def test_mutations_are_rejected(self):
        before = [row.raw for row in self.buffer.rows]
        self.assertEqual(self.buffer.insert_char(0, 1, "z"), (0, 1))
        self.assertEqual(self.buffer.insert_newline(0, 1), (0, 1))
        self.assertEqual(self.buffer.delete_char(1, 0), (1, 0))
        self.assertEqual([row.raw for row in self.buffer.rows], before)
        self.assertEqual(self.buffer.dirty, 0)
        self.assertEqual(self.buffer.status.message(), READ_ONLY_MESSAGE)

    def test_missing_directory(self):
        with self.assertRaises(OSError):
            TextBuffer.from_directory(os.path.join(self.temp_dir.name, "missing"))


class TestPersistence(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.temp_dir.cleanup()

    def _path(self, name):
        return os.path.join(self.temp_dir.name, name)

    def test_save_without_filename(self):
        buffer = TextBuffer.from_lines(["abc"])
        buffer.insert_char(0, 3, "d")
        with self.assertRaises(NoFileNameError):
            buffer.save()
        self.assertEqual(buffer.dirty, 1)

    def test_save_writes_rows_joined_by_newlines(self):
        path = self._path("main.rs")
        buffer = TextBuffer.from_lines(["fn main() {", "}"], filename=path)
        buffer.insert_char(1, 1, ";")
        written = buffer.save()

        with open(path, "rb") as fh:
            data = fh.read()
        self.assertEqual(data, b"fn main() {\n};")
        self.assertEqual(written, len(data))
        self.assertEqual(buffer.dirty, 0)

    def test_save_overwrites_existing_file(self):
        path = self._path("notes.txt")
        with open(path, "w") as fh:
            fh.write("a much longer previous content\n")
        TextBuffer.from_lines(["short"], filename=path).save()
        with open(path) as fh:
            self.assertEqual(fh.read(), "short")

    def test_save_io_error_keeps_dirty(self):
        buffer = TextBuffer.from_lines(["x"], filename=self._path("no/such/dir/file.txt"))
        buffer.insert_char(0, 0, "y")
        with self.assertRaises(OSError):
            buffer.save()
        self.assertEqual(buffer.dirty, 1)

    def test_from_file(self):
        path = self._path("lib.rs")
        with open(path, "wb") as fh:
            fh.write(b"let a = 1;\r\nlet b;\n")
        buffer = TextBuffer.from_file(path)
        self.assertEqual([row.raw for row in buffer.rows], ["let a = 1;", "let b;"])
        self.assertEqual(buffer.filename, path)
        self.assertEqual(buffer.syntax_name, "rust")
        self.assertEqual(buffer.encoding, "utf-8")
        self.assertEqual(buffer.get_editor_row(0).highlight[:3], [HighlightTag.KEYWORD] * 3)

    def test_from_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            TextBuffer.from_file(self._path("missing.rs"))

    def test_save_as_detects_new_syntax(self):
        buffer = TextBuffer.from_lines(["x = 1  # c"])
        self.assertIsNone(buffer.syntax_name)
        path = self._path("script.py")
        written = buffer.save_as(path)
        self.assertEqual(written, len("x = 1  # c"))
        self.assertEqual(buffer.filename, path)
        self.assertEqual(buffer.syntax_name, "python")
        self.assertEqual(buffer.get_editor_row(0).highlight[-3:], [HighlightTag.COMMENT] * 3)


class TestHelpers(unittest.TestCase):

    def test_split_lines(self):
        self.assertEqual(split_lines(""), [])
        self.assertEqual(split_lines("a\nb\n"), ["a", "b"])
        self.assertEqual(split_lines("a\r\nb"), ["a", "b"])
        self.assertEqual(split_lines("a\n\n"), ["a", ""])

    def test_detect_encoding(self):
        self.assertEqual(detect_encoding(b""), "utf-8")
        self.assertEqual(detect_encoding(b"plain ascii text"), "utf-8")
        self.assertEqual(detect_encoding("zażółć gęślą jaźń, łódź".encode("utf-8") * 20), "utf-8")


if __name__ == "__main__":
    unittest.main()
