"""Tests for the TextEditor operations: view, create, str_replace,
replace_lines, insert and undo.
"""

import pytest

from patch_engine.config import Config
from patch_engine.editing.confirmation import (
    AutoApprove, ConfirmationResponse, RejectAll,
)
from patch_engine.editing.filesystem import LocalFileSystem
from patch_engine.editing.history import CreateRecord, InsertRecord, StrReplaceRecord
from patch_engine.editing.metrics import read_edit_stats
from patch_engine.editing.text_editor import TextEditor, ToolResult


class RecordingGate:
    """Approves everything and keeps every request it saw."""

    def __init__(self, confirmed=True):
        self.confirmed = confirmed
        self.requests = []

    def request_confirmation(self, request):
        self.requests.append(request)
        return ConfirmationResponse(confirmed=self.confirmed)


class ReadOnlyFileSystem(LocalFileSystem):
    def write_text(self, path, content):
        raise PermissionError(f"Permission denied: '{path}'")


@pytest.fixture
def config(monkeypatch):
    for name in ("CONTEXT_LINES", "PREVIEW_LINES", "CONFIRM_INSERTS"):
        monkeypatch.delenv(f"PATCHENGINE_{name}", raising=False)
    return Config()


@pytest.fixture
def editor(tmp_path, config):
    return TextEditor(fs=LocalFileSystem(str(tmp_path)), config=config)


def _write(tmp_path, name, content):
    (tmp_path / name).write_bytes(content.encode("utf-8"))


def _read(tmp_path, name):
    return (tmp_path / name).read_bytes().decode("utf-8")


GREET_FILE = "\n".join([
    "const x = 1;",
    "function greet(name) {",
    "  if (name) {",
    "    console.log('Hello ' + name);",
    "  }",
    "  return name;",
    "}",
    "function other() {",
    "  return 2;",
    "}",
])


class TestToolResult:
    def test_ok(self):
        result = ToolResult.ok("done")
        assert result.success and result.output == "done" and result.error is None

    def test_fail(self):
        result = ToolResult.fail("boom", "IOFailure")
        assert not result.success
        assert result.error == "boom"
        assert result.error_kind == "IOFailure"


class TestView:
    def test_whole_file(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "l1\nl2\nl3")
        result = editor.view("f.txt")
        assert result.output == "Contents of f.txt:\n1: l1\n2: l2\n3: l3"

    def test_long_file_truncated(self, editor, tmp_path, config):
        config.PREVIEW_LINES = 2
        _write(tmp_path, "f.txt", "a\nb\nc\nd")
        result = editor.view("f.txt")
        assert result.output == "Contents of f.txt:\n1: a\n2: b\n... +2 more lines"

    def test_range(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "l1\nl2\nl3\nl4\nl5")
        result = editor.view("f.txt", (2, 3))
        assert result.output == "Lines 2-3 of f.txt:\n2: l2\n3: l3"

    def test_range_clamped_to_end(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "l1\nl2\nl3\nl4\nl5")
        result = editor.view("f.txt", (4, 99))
        assert result.output == "Lines 4-5 of f.txt:\n4: l4\n5: l5"

    @pytest.mark.parametrize("view_range", [(0, 2), (3, 2), (6, 7)])
    def test_invalid_range(self, editor, tmp_path, view_range):
        _write(tmp_path, "f.txt", "l1\nl2\nl3\nl4\nl5")
        result = editor.view("f.txt", view_range)
        assert not result.success
        assert result.error_kind == "InvalidRange"

    def test_directory(self, editor, tmp_path):
        _write(tmp_path, "b.txt", "")
        _write(tmp_path, "a.txt", "")
        result = editor.view(".")
        assert result.output == "Directory contents of .:\na.txt\nb.txt"

    def test_missing(self, editor):
        result = editor.view("nope.txt")
        assert result.error == "File or directory not found: nope.txt"
        assert result.error_kind == "NotFound"


class TestCreate:
    def test_new_file(self, editor, tmp_path):
        result = editor.create("a.txt", "hello\nworld")

        assert result.success
        assert result.output == (
            "Updated a.txt with 2 additions\n"
            "--- a/a.txt\n"
            "+++ b/a.txt\n"
            "@@ -0,0 +1,2 @@\n"
            "+hello\n"
            "+world"
        )
        assert _read(tmp_path, "a.txt") == "hello\nworld"
        assert editor.edit_history() == [CreateRecord("a.txt")]

    def test_creates_parent_dirs(self, editor, tmp_path):
        assert editor.create("pkg/sub/mod.py", "x = 1\n").success
        assert _read(tmp_path, "pkg/sub/mod.py") == "x = 1\n"

    def test_overwrite_keeps_previous_content(self, editor, tmp_path):
        _write(tmp_path, "a.txt", "before")
        editor.create("a.txt", "after")
        assert editor.edit_history() == [CreateRecord("a.txt", previous_content="before")]

    def test_gate_sees_write_request(self, tmp_path, config):
        gate = RecordingGate()
        editor = TextEditor(fs=LocalFileSystem(str(tmp_path)), gate=gate, config=config)
        result = editor.create("a.txt", "x")

        assert len(gate.requests) == 1
        request = gate.requests[0]
        assert request.operation == "Write"
        assert request.path == "a.txt"
        assert request.preview_diff == result.output

    def test_rejected(self, tmp_path, config):
        editor = TextEditor(fs=LocalFileSystem(str(tmp_path)), gate=RejectAll(), config=config)
        result = editor.create("a.txt", "x")

        assert result.error == "File creation cancelled by user"
        assert result.error_kind == "RejectedByUser"
        assert not (tmp_path / "a.txt").exists()
        assert editor.edit_history() == []

    def test_rejection_feedback_becomes_error(self, tmp_path, config):
        editor = TextEditor(
            fs=LocalFileSystem(str(tmp_path)), gate=RejectAll("use b.txt"), config=config,
        )
        assert editor.create("a.txt", "x").error == "use b.txt"


class TestStrReplace:
    def test_first_occurrence_only(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "x = 1\nx = 1\nx = 1")
        result = editor.str_replace("f.txt", "x = 1", "y = 2")

        assert result.success
        assert "Updated f.txt with 1 addition and 1 removal" in result.output
        assert _read(tmp_path, "f.txt") == "y = 2\nx = 1\nx = 1"

    def test_replace_all(self, tmp_path, config):
        _write(tmp_path, "f.txt", "x = 1\nx = 1\nx = 1")
        gate = RecordingGate()
        editor = TextEditor(fs=LocalFileSystem(str(tmp_path)), gate=gate, config=config)
        result = editor.str_replace("f.txt", "x = 1", "y = 2", replace_all=True)

        assert result.success
        assert _read(tmp_path, "f.txt") == "y = 2\ny = 2\ny = 2"
        assert gate.requests[0].operation == "Edit file (3 occurrences)"
        assert editor.edit_history() == [
            StrReplaceRecord(
                "f.txt", "x = 1", "y = 2",
                replace_all=True, occurrences=3, positions=(0, 6, 12),
            ),
        ]

    def test_single_line_not_found(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "abc")
        result = editor.str_replace("f.txt", "xyz", "q")
        assert result.error == 'String not found in file: "xyz"'
        assert result.error_kind == "NotFound"

    def test_multi_line_not_found(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "abc")
        result = editor.str_replace("f.txt", "foo\nbar", "q")
        assert result.error == (
            "String not found in file. For multi-line replacements, "
            "consider using line-based editing."
        )

    def test_empty_search_string(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "abc")
        result = editor.str_replace("f.txt", "", "q")
        assert result.error_kind == "NotFound"
        assert _read(tmp_path, "f.txt") == "abc"

    def test_missing_file(self, editor):
        result = editor.str_replace("nope.txt", "a", "b")
        assert result.error == "File not found: nope.txt"

    def test_identical_replacement_is_no_change(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "abc")
        result = editor.str_replace("f.txt", "b", "b")
        assert result.error == "No changes in f.txt"
        assert result.error_kind == "NoChanges"
        assert editor.edit_history() == []

    def test_fuzzy_function_match(self, editor, tmp_path):
        _write(tmp_path, "app.js", GREET_FILE)
        search = "\n".join([
            "function greet(name) {",
            "    if (name) {",
            '        console.log("Hello " + name);',
            "    }",
            "    return name;",
            "}",
        ])
        replacement = "function greet(name) {\n  return `Hi ${name}`;\n}"
        result = editor.str_replace("app.js", search, replacement)

        assert result.success
        assert _read(tmp_path, "app.js") == (
            "const x = 1;\n" + replacement + "\nfunction other() {\n  return 2;\n}"
        )

    def test_fuzzy_structure_mismatch(self, editor, tmp_path):
        _write(tmp_path, "app.js", GREET_FILE)
        search = "\n".join([
            "function greet(name) {",
            "  if (!name) { return null; }",
            "  if (name) {",
            "    console.log('Hello ' + name);",
            "  }",
            "  return name;",
            "}",
        ])
        result = editor.str_replace("app.js", search, "x")

        assert result.error_kind == "NotFound"
        assert _read(tmp_path, "app.js") == GREET_FILE

    def test_rejected_leaves_file(self, tmp_path, config):
        _write(tmp_path, "f.txt", "abc")
        editor = TextEditor(fs=LocalFileSystem(str(tmp_path)), gate=RejectAll(), config=config)
        result = editor.str_replace("f.txt", "b", "X")

        assert result.error == "File edit cancelled by user"
        assert _read(tmp_path, "f.txt") == "abc"

    def test_write_failure_is_io_failure(self, tmp_path, config):
        _write(tmp_path, "f.txt", "abc")
        editor = TextEditor(fs=ReadOnlyFileSystem(str(tmp_path)), config=config)
        result = editor.str_replace("f.txt", "b", "X")

        assert result.error_kind == "IOFailure"
        assert result.error.startswith("Error replacing text in f.txt:")
        assert editor.edit_history() == []


class TestReplaceLines:
    def test_replace_range(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "l1\nl2\nl3\nl4\nl5")
        result = editor.replace_lines("f.txt", 2, 3, "new")

        assert result.success
        assert _read(tmp_path, "f.txt") == "l1\nnew\nl4\nl5"
        assert editor.edit_history() == [
            StrReplaceRecord("f.txt", "l2\nl3", "new", start_line=2),
        ]

    def test_single_line_file(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "only")
        assert editor.replace_lines("f.txt", 1, 1, "changed").success
        assert _read(tmp_path, "f.txt") == "changed"

    def test_end_before_start(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "l1\nl2\nl3\nl4\nl5")
        result = editor.replace_lines("f.txt", 5, 3, "x")
        assert result.error == "Invalid end line: 3. Must be between 5 and 5."
        assert result.error_kind == "InvalidRange"

    def test_start_out_of_range(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "l1\nl2")
        result = editor.replace_lines("f.txt", 0, 1, "x")
        assert result.error == "Invalid start line: 0. File has 2 lines."

    def test_end_past_file(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "l1\nl2")
        assert editor.replace_lines("f.txt", 1, 3, "x").error_kind == "InvalidRange"

    def test_same_content_is_no_change(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "l1\nl2")
        assert editor.replace_lines("f.txt", 2, 2, "l2").error_kind == "NoChanges"

    def test_gate_operation_label(self, tmp_path, config):
        _write(tmp_path, "f.txt", "l1\nl2\nl3")
        gate = RecordingGate(confirmed=False)
        editor = TextEditor(fs=LocalFileSystem(str(tmp_path)), gate=gate, config=config)
        result = editor.replace_lines("f.txt", 1, 2, "x")

        assert gate.requests[0].operation == "Replace lines 1-2"
        assert result.error == "Line replacement cancelled by user"


class TestInsert:
    def test_insert_in_middle(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "a\nb\nc")
        result = editor.insert("f.txt", 2, "X")

        assert result.output == "Successfully inserted content at line 2 in f.txt"
        assert _read(tmp_path, "f.txt") == "a\nX\nb\nc"
        assert editor.edit_history() == [InsertRecord("f.txt", 2, "X")]

    def test_append_after_last_line(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "a\nb\nc")
        assert editor.insert("f.txt", 4, "X").success
        assert _read(tmp_path, "f.txt") == "a\nb\nc\nX"

    @pytest.mark.parametrize("line", [0, 5])
    def test_out_of_range(self, editor, tmp_path, line):
        _write(tmp_path, "f.txt", "a\nb\nc")
        result = editor.insert("f.txt", line, "X")
        assert result.error == f"Invalid insert line: {line}. Must be between 1 and 4."
        assert result.error_kind == "InvalidRange"

    def test_skips_gate_by_default(self, tmp_path, config):
        _write(tmp_path, "f.txt", "a")
        gate = RecordingGate(confirmed=False)
        editor = TextEditor(fs=LocalFileSystem(str(tmp_path)), gate=gate, config=config)

        assert editor.insert("f.txt", 1, "X").success
        assert gate.requests == []

    def test_confirm_inserts_policy(self, tmp_path, config):
        config.CONFIRM_INSERTS = True
        _write(tmp_path, "f.txt", "a\nb")
        gate = RecordingGate()
        editor = TextEditor(fs=LocalFileSystem(str(tmp_path)), gate=gate, config=config)

        assert editor.insert("f.txt", 2, "X").success
        assert gate.requests[0].operation == "Insert at line 2"
        assert "+X" in gate.requests[0].preview_diff

    def test_confirm_inserts_rejected(self, tmp_path, config):
        config.CONFIRM_INSERTS = True
        _write(tmp_path, "f.txt", "a")
        editor = TextEditor(fs=LocalFileSystem(str(tmp_path)), gate=RejectAll(), config=config)
        result = editor.insert("f.txt", 1, "X")

        assert result.error == "Insert cancelled by user"
        assert _read(tmp_path, "f.txt") == "a"


class TestUndo:
    def test_nothing_to_undo(self, editor):
        result = editor.undo()
        assert result.error == "No edits to undo"
        assert result.error_kind == "NothingToUndo"

    def test_undo_str_replace_restores_first_occurrence(self, editor, tmp_path):
        original = "x = 1\nx = 1\nx = 1"
        _write(tmp_path, "f.txt", original)
        editor.str_replace("f.txt", "x = 1", "y = 2")

        result = editor.undo()

        assert result.output == "Successfully undid str_replace operation"
        assert _read(tmp_path, "f.txt") == original
        assert editor.edit_history() == []

    def test_undo_replace_all_restores_every_occurrence(self, editor, tmp_path):
        original = "x = 1\nx = 1\nx = 1"
        _write(tmp_path, "f.txt", original)
        editor.str_replace("f.txt", "x = 1", "y = 2", replace_all=True)

        editor.undo()
        assert _read(tmp_path, "f.txt") == original

    def test_undo_create_removes_file(self, editor, tmp_path):
        editor.create("a.txt", "x")
        result = editor.undo()

        assert result.output == "Successfully undid create operation"
        assert not (tmp_path / "a.txt").exists()

    def test_undo_create_restores_overwritten_file(self, editor, tmp_path):
        _write(tmp_path, "a.txt", "before")
        editor.create("a.txt", "after")
        editor.undo()
        assert _read(tmp_path, "a.txt") == "before"

    def test_undo_insert(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "a\nb\nc")
        editor.insert("f.txt", 2, "X\nY")
        assert _read(tmp_path, "f.txt") == "a\nX\nY\nb\nc"

        assert editor.undo().output == "Successfully undid insert operation"
        assert _read(tmp_path, "f.txt") == "a\nb\nc"

    def test_undo_replace_lines(self, editor, tmp_path):
        original = "l1\nl2\nl3\nl4\nl5"
        _write(tmp_path, "f.txt", original)
        editor.replace_lines("f.txt", 2, 3, "new")

        assert editor.undo().success
        assert _read(tmp_path, "f.txt") == original

    def test_undo_in_reverse_order(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "a\nb")
        editor.str_replace("f.txt", "a", "A")
        editor.insert("f.txt", 3, "c")

        editor.undo()
        assert _read(tmp_path, "f.txt") == "A\nb"
        editor.undo()
        assert _read(tmp_path, "f.txt") == "a\nb"

    def test_replacement_no_longer_present(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "abc")
        editor.str_replace("f.txt", "b", "QQ")
        _write(tmp_path, "f.txt", "changed elsewhere")

        result = editor.undo()

        assert result.error_kind == "NotFound"
        assert _read(tmp_path, "f.txt") == "changed elsewhere"
        assert editor.edit_history() == []

    def test_undo_deletion(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "abc")
        editor.str_replace("f.txt", "b", "")

        assert editor.undo().success
        assert _read(tmp_path, "f.txt") == "abc"

    def test_undo_replace_lines_when_new_text_also_appears_above(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "new\nl2\nl3")
        editor.replace_lines("f.txt", 2, 3, "new")
        assert _read(tmp_path, "f.txt") == "new\nnew"

        assert editor.undo().success
        assert _read(tmp_path, "f.txt") == "new\nl2\nl3"

    def test_undo_replace_lines_after_range_changed(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "l1\nl2\nl3")
        editor.replace_lines("f.txt", 2, 2, "mid")
        _write(tmp_path, "f.txt", "l1\nother\nl3")

        assert editor.undo().error_kind == "NotFound"
        assert _read(tmp_path, "f.txt") == "l1\nother\nl3"

    def test_undo_replace_all_keeps_preexisting_copies(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "y\nx\nx")
        editor.str_replace("f.txt", "x", "y", replace_all=True)
        assert _read(tmp_path, "f.txt") == "y\ny\ny"

        editor.undo()
        assert _read(tmp_path, "f.txt") == "y\nx\nx"

    def test_undo_single_replace_ignores_earlier_copy(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "b\na")
        editor.str_replace("f.txt", "a", "b")

        editor.undo()
        assert _read(tmp_path, "f.txt") == "b\na"

    def test_undo_replacement_with_different_length(self, editor, tmp_path):
        original = "id = 1\nid = 2\nid = 3"
        _write(tmp_path, "f.txt", original)
        editor.str_replace("f.txt", "id", "identifier", replace_all=True)

        editor.undo()
        assert _read(tmp_path, "f.txt") == original

    def test_failed_edit_not_recorded(self, editor, tmp_path):
        _write(tmp_path, "f.txt", "abc")
        editor.str_replace("f.txt", "zzz", "q")
        assert editor.undo().error_kind == "NothingToUndo"


class TestJournal:
    def test_committed_and_rejected_edits_logged(self, tmp_path, config):
        root = str(tmp_path)
        gate = RecordingGate()
        editor = TextEditor(
            fs=LocalFileSystem(root), gate=gate, config=config, journal_root=root,
        )
        editor.create("a.txt", "one\ntwo")
        gate.confirmed = False
        editor.str_replace("a.txt", "one", "uno")

        stats = read_edit_stats(project_root=root)

        assert stats["total_edits"] == 2
        assert stats["approval_rate"] == 50.0
        assert stats["lines_added"] == 3
        assert stats["lines_removed"] == 1
        assert stats["operations"] == {"create": 1, "str_replace": 1}

    def test_undo_logged(self, tmp_path, config):
        root = str(tmp_path)
        editor = TextEditor(
            fs=LocalFileSystem(root), gate=AutoApprove(), config=config, journal_root=root,
        )
        editor.create("a.txt", "x")
        editor.undo()
        assert read_edit_stats(project_root=root)["operations"]["undo_create"] == 1

    def test_no_journal_without_root(self, editor, tmp_path):
        editor.create("a.txt", "x")
        assert not (tmp_path / ".patchengine").exists()
