from pathlib import Path
from typing import List

import pytest

from quill import Buffer, BufferMirror, Editor
from quill.adapters.textual import TextualFrontend, TextualUIHooks, translate_key
from quill.adapters.textual.app import main, render_mirror
from quill.frontend import QUIT, Alt, Char, Control, EditorSession, FrontendError, Key, Shift


def make_frontend(size: tuple[int, int] = (40, 5)):
    mirrors: List[BufferMirror] = []
    statuses: List[str] = []
    closed: List[bool] = []
    hooks = TextualUIHooks(
        update_buffer=mirrors.append,
        update_status=statuses.append,
        close=lambda: closed.append(True),
    )
    return TextualFrontend(hooks, size=lambda: size), mirrors, statuses, closed


@pytest.mark.parametrize(
    ("key", "character", "expected"),
    [
        ("a", "a", Char("a")),
        ("A", "A", Char("A")),
        ("space", " ", Char(" ")),
        ("exclamation_mark", "!", Char("!")),
        ("enter", "\r", Key.ENTER),
        ("tab", "\t", Key.TAB),
        ("escape", "\x1b", Key.ESC),
        ("backspace", "\x7f", Key.BACKSPACE),
        ("pageup", None, Key.PAGE_UP),
        ("ctrl+s", "\x13", Control(Char("s"))),
        ("shift+left", None, Shift(Key.LEFT)),
        ("alt+q", None, Alt(Char("q"))),
        ("alt+apostrophe", None, Alt(Char("'"))),
        ("ctrl+shift+home", None, Control(Shift(Key.HOME))),
    ],
)
def test_translate_key(key: str, character, expected) -> None:
    assert translate_key(key, character) == expected


def test_translate_key_ignores_unknown_keys() -> None:
    assert translate_key("f5", None) is None
    assert translate_key("hyper+a", None) is None


def test_keys_flow_through_the_queue() -> None:
    frontend, *_ = make_frontend()
    editor = Editor()

    assert frontend.feed_key("x", "x")
    assert not frontend.feed_key("f12", None)

    assert frontend.wait_for_input(editor) == Char("x")


def test_close_unblocks_waiters() -> None:
    frontend, _, _, closed = make_frontend()
    frontend.close()

    with pytest.raises(FrontendError):
        frontend.wait_for_input(Editor())
    with pytest.raises(FrontendError):
        frontend.prompt("Name: ")

    frontend.exit()
    assert closed == []


def test_prompt_waits_for_submitted_answer() -> None:
    frontend, *_ = make_frontend()
    requests: List[tuple[str, str]] = []

    def answer(text: str, default: str) -> None:
        requests.append((text, default))
        frontend.submit_prompt("notes.txt")

    frontend.hooks.request_prompt = answer

    assert frontend.prompt("Enter file name: ", "x") == "notes.txt"
    assert requests == [("Enter file name: ", "x")]


def test_cancelled_prompt_raises() -> None:
    frontend, *_ = make_frontend()
    frontend.hooks.request_prompt = lambda text, default: frontend.submit_prompt(None)

    with pytest.raises(FrontendError):
        frontend.ask("Save?")


def test_render_scrolls_to_cursor_and_skips_duplicates() -> None:
    frontend, mirrors, _, _ = make_frontend(size=(20, 2))
    buffer = Buffer.from_text("\n".join(str(n) for n in range(8)))
    buffer.set_cursor(5, 0)
    editor = Editor(buffers=[buffer])

    frontend.render(editor)
    frontend.render(editor)
    assert len(mirrors) == 1
    assert mirrors[0].top == 4
    assert mirrors[0].lines == ("4", "5")

    frontend.render(editor, True)
    assert len(mirrors) == 2


def test_session_runs_over_textual_frontend() -> None:
    frontend, mirrors, statuses, closed = make_frontend()
    editor = Editor()
    for key, character in (("h", "h"), ("i", "i"), ("alt+q", None)):
        frontend.feed_key(key, character)

    EditorSession(editor, frontend).run()

    assert editor.cur_buf().content() == ("hi",)
    assert statuses[0] == "Editing in buffer #0: unnamed"
    assert mirrors[-1].cursor == (0, 2)
    assert closed == [True]
    assert QUIT == Alt(Char("q"))


def test_render_mirror_highlights_cursor() -> None:
    buffer = Buffer.from_text("ab\ncd")
    buffer.set_cursor(1, 2)

    text = render_mirror(buffer.mirror())

    assert text.plain == "ab\ncd "


def test_main_without_ui_prints_last_result(capsys, monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("QUILL_STARTUP_SCRIPT", raising=False)
    script = tmp_path / "init.ql"
    script.write_text("x = 40", encoding="utf-8")

    assert main(["--no-ui", "--script", str(script), "--eval", "x + 2"]) == 0

    assert capsys.readouterr().out.strip() == "42"


def test_main_reports_failing_startup(capsys, monkeypatch) -> None:
    monkeypatch.delenv("QUILL_STARTUP_SCRIPT", raising=False)

    assert main(["--no-ui", "--eval", "nope"]) == 1

    assert "SymbolNotDefined" in capsys.readouterr().err


def test_render_mirror_replaces_undecodable_bytes() -> None:
    text = render_mirror(Buffer.from_text("a\udcff").mirror())

    assert text.plain == "a\ufffd"


def test_main_opens_files_that_are_not_utf8(capsys, monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("QUILL_STARTUP_SCRIPT", raising=False)
    binary = tmp_path / "binary.txt"
    binary.write_bytes(b"\xff\xfe\x00bad")

    assert main([str(binary), "--no-ui", "--eval", "get-buf ()"]) == 0

    assert capsys.readouterr().out.strip() == "0"


def test_main_reports_unreadable_files(capsys, monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("QUILL_STARTUP_SCRIPT", raising=False)

    assert main([str(tmp_path), "--no-ui"]) == 1

    assert "cannot open file" in capsys.readouterr().err
