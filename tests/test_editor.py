from pathlib import Path

import pytest

from quill import Buffer, Direction, Editor, EditorConfig
from quill.lang import ErrorKind, EvalError, Int, Symbol


def make_editor(*texts: str) -> Editor:
    return Editor(buffers=[Buffer.from_text(text) for text in texts or ("",)])


def test_starts_with_one_empty_buffer() -> None:
    editor = Editor()

    assert editor.buffer_count == 1
    assert editor.cur_buf_id() == 0
    assert editor.cur_buf().content() == ("",)
    assert editor.env.lookup("insert") is not None


def test_from_file_names_opens_each_file(tmp_path: Path) -> None:
    first = tmp_path / "a.txt"
    first.write_text("alpha\n", encoding="utf-8")

    editor = Editor.from_file_names([str(first), str(tmp_path / "new.txt")])

    assert editor.buffer_count == 2
    assert editor.buffers[0].content() == ("alpha",)
    assert editor.buffers[1].content() == ("",)


def test_buffer_navigation_wraps() -> None:
    editor = make_editor("a", "b", "c")

    editor.prev_buf()
    assert editor.cur_buf_id() == 2

    editor.next_buf()
    assert editor.cur_buf_id() == 0

    editor.set_buf(7)
    assert editor.cur_buf_id() == 2
    assert editor.max_buf_id() == 2


def test_quit_buf_removes_current_and_clamps() -> None:
    editor = make_editor("a", "b")
    editor.set_buf(1)

    closed = editor.quit_buf()

    assert closed is not None and closed.content() == ("b",)
    assert editor.cur_buf_id() == 0

    editor.quit_buf()
    assert editor.cur_buf() is None
    assert editor.cur_buf_id() is None
    assert editor.max_buf_id() is None
    assert editor.quit_buf() is None


def test_quit_buf_can_save_first(tmp_path: Path) -> None:
    target = tmp_path / "out.txt"
    editor = make_editor()
    editor.insert("data")
    editor.cur_buf().set_file_name(str(target))

    editor.quit_buf(save=True)

    assert target.read_text(encoding="utf-8") == "data"


def test_save_buf_names_the_buffer(tmp_path: Path) -> None:
    editor = make_editor("text")
    target = str(tmp_path / "named.txt")

    assert editor.save_buf(target) == target
    assert editor.cur_buf().file_name == target

    with pytest.raises(ValueError):
        make_editor().save_buf()


def test_new_edits_clear_the_redo_stack() -> None:
    editor = make_editor()
    editor.insert("ab")
    editor.undo()
    assert editor.cur_buf().redo_stack

    editor.move_cursor(Direction.RIGHT)

    assert editor.cur_buf().redo_stack == []


def test_select_and_unselect_only_record_state_changes() -> None:
    editor = make_editor("abc")

    editor.unselect()
    editor.select()
    editor.select()
    editor.move_cursor(Direction.RIGHT, 2)

    assert editor.get_selected() == "ab"
    assert len(editor.cur_buf().undo_stack) == 2

    editor.unselect()
    editor.unselect()
    assert editor.get_selected() is None
    assert len(editor.cur_buf().undo_stack) == 3


def test_operations_without_buffers_are_noops() -> None:
    editor = Editor(buffers=[])

    editor.insert("x")
    editor.delete(1)
    editor.move_cursor(Direction.LEFT)
    editor.undo()

    assert editor.cursor() is None
    assert editor.get_selected() is None
    assert editor.save_buf() is None


def test_eval_commits_environment() -> None:
    editor = make_editor()

    editor.eval_source("x = 2")

    assert editor.env.lookup("x") == Int(2)


def test_max_eval_depth_comes_from_config() -> None:
    editor = Editor(config=EditorConfig(max_eval_depth=3))
    editor.eval_source("f = fn(n) -> n; g = fn(n) -> f n; h = fn(n) -> g n")

    assert editor.eval_source("h 1") == Int(1)
    with pytest.raises(EvalError) as info:
        editor.eval_source("k = fn(n) -> h n; k 1")
    assert info.value.kind == ErrorKind.RECURSION_LIMIT.value


def test_invalid_syntax_from_eval_source() -> None:
    editor = make_editor()

    with pytest.raises(EvalError) as info:
        editor.eval_source("let in")

    assert info.value.kind == ErrorKind.INVALID_SYNTAX.value
    assert editor.env.lookup("in") is None
    assert Symbol("x") not in editor.env
