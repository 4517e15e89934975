from pathlib import Path
from typing import Iterable, List, Optional

from quill import Buffer, Editor, EditorConfig
from quill.frontend import (
    QUIT,
    Alt,
    Char,
    Control,
    EditorSession,
    FrontendError,
    Input,
    Key,
    PromptingFrontend,
    Shift,
)
from quill.lang import Int


class ScriptedFrontend(PromptingFrontend):
    """Replays queued keys and prompt answers; runs dry with ``FrontendError``."""

    def __init__(self, keys: Iterable[Input] = (), answers: Iterable[Optional[str]] = ()) -> None:
        self.keys: List[Input] = list(keys)
        self.answers: List[Optional[str]] = list(answers)
        self.statuses: List[str] = []
        self.prompts: List[str] = []
        self.renders = 0
        self.exited = False

    def render(self, editor: Editor, force: bool = False) -> None:
        self.renders += 1

    def wait_for_input(self, editor: Editor) -> Input:
        if not self.keys:
            raise FrontendError("out of input")
        return self.keys.pop(0)

    def set_status(self, text: str) -> None:
        self.statuses.append(text)

    def prompt(self, text: str, default: str = "") -> str:
        self.prompts.append(text)
        if not self.answers:
            raise FrontendError("no answer")
        answer = self.answers.pop(0)
        if answer is None:
            raise FrontendError()
        return answer

    def exit(self) -> None:
        self.exited = True

    def height(self) -> int:
        return 3

    def width(self) -> int:
        return 40


def make_session(
    *texts: str,
    keys: Iterable[Input] = (),
    answers: Iterable[Optional[str]] = (),
    config: Optional[EditorConfig] = None,
) -> tuple[EditorSession, ScriptedFrontend]:
    editor = Editor(config=config, buffers=[Buffer.from_text(text) for text in texts or ("",)])
    frontend = ScriptedFrontend(keys, answers)
    return EditorSession(editor, frontend), frontend


def typed(text: str) -> list[Input]:
    return [Char(ch) for ch in text]


def content(session: EditorSession) -> tuple[str, ...]:
    return tuple(session.editor.cur_buf().content())


def test_typing_and_editing_keys() -> None:
    session, frontend = make_session(keys=[*typed("hi"), Key.ENTER, Key.TAB, Char("x"), Key.BACKSPACE])

    session.run()

    assert content(session) == ("hi", "    ")
    assert frontend.exited
    assert frontend.statuses[0] == "Editing in buffer #0: unnamed"


def test_quit_stops_the_loop() -> None:
    session, frontend = make_session(keys=[Char("a"), QUIT, Char("b")])

    session.run()

    assert content(session) == ("a",)
    assert frontend.keys == [Char("b")]
    assert not session.running


def test_backspace_at_document_start_is_noop() -> None:
    session, _ = make_session("abc")

    session.handle(Key.BACKSPACE)

    assert content(session) == ("abc",)
    assert session.editor.cur_buf().undo_stack == []


def test_delete_key_removes_character_under_cursor() -> None:
    session, _ = make_session("abc")

    session.handle(Key.DELETE)
    assert content(session) == ("bc",)

    session.editor.goto_cursor((0, 2))
    session.handle(Key.DELETE)
    assert content(session) == ("bc",)


def test_home_end_and_paging() -> None:
    session, _ = make_session("\n".join(f"line {n}" for n in range(10)))

    session.handle(Key.END)
    assert session.editor.cursor() == (0, 6)

    session.handle(Key.HOME)
    assert session.editor.cursor() == (0, 0)

    session.handle(Key.PAGE_DOWN)
    assert session.editor.cursor() == (3, 0)

    session.config.page_size = 5
    session.handle(Key.PAGE_DOWN)
    assert session.editor.cursor() == (8, 0)

    session.handle(Key.PAGE_UP)
    assert session.editor.cursor() == (3, 0)


def test_shift_extends_selection_and_typing_replaces_nothing() -> None:
    session, _ = make_session("hello")

    session.handle(Shift(Key.RIGHT))
    session.handle(Shift(Key.RIGHT))
    assert session.editor.get_selected() == "he"

    session.handle(Shift(Char("x")))
    assert session.editor.get_selected() is None
    assert content(session) == ("heXllo",)


def test_backspace_deletes_selection() -> None:
    session, _ = make_session("hello world")

    session.handle(Shift(Key.END))
    session.handle(Key.BACKSPACE)

    assert content(session) == ("",)
    assert session.editor.get_selected() is None


def test_copy_cut_paste() -> None:
    session, _ = make_session("abc")

    for key in (Shift(Key.RIGHT), Shift(Key.RIGHT), Control(Char("c"))):
        session.handle(key)
    assert session.clipboard == "ab"

    session.handle(Control(Char("x")))
    assert content(session) == ("c",)

    session.handle(Key.END)
    session.handle(Control(Char("v")))
    assert content(session) == ("cab",)


def test_select_all_then_cut() -> None:
    session, _ = make_session("one\ntwo")

    session.handle(Control(Char("a")))
    assert session.editor.get_selected() == "one\ntwo"

    session.handle(Control(Char("x")))
    assert content(session) == ("",)
    assert session.clipboard == "one\ntwo"


def test_undo_redo_keys() -> None:
    session, _ = make_session()

    for key in (*typed("ab"), Control(Char("z")), Control(Char("z"))):
        session.handle(key)
    assert content(session) == ("",)

    session.handle(Control(Char("y")))
    assert content(session) == ("a",)


def test_save_prompts_for_unnamed_buffer(tmp_path: Path) -> None:
    target = tmp_path / "saved.txt"
    session, frontend = make_session("text", answers=[str(target)])

    session.handle(Control(Char("s")))

    assert target.read_text(encoding="utf-8") == "text"
    assert frontend.statuses[-1] == f"Saved {target}"
    assert frontend.prompts == ["Enter file name: "]


def test_cancelled_prompt_reports_on_status_line() -> None:
    session, frontend = make_session("text", answers=[None])

    session.handle(Control(Char("s")))

    assert frontend.statuses[-1] == "Cancelled"
    assert session.editor.cur_buf().file_name is None


def test_close_edited_buffer_asks_to_save(tmp_path: Path) -> None:
    target = tmp_path / "closed.txt"
    session, frontend = make_session("", "other", answers=["maybe", "y", str(target)])
    session.handle(Char("z"))

    session.handle(Control(Char("q")))

    assert target.read_text(encoding="utf-8") == "z"
    assert session.editor.buffer_count == 1
    assert "Please answer 'y' or 'n'" in frontend.statuses
    assert content(session) == ("other",)


def test_closing_last_buffer_ends_the_session() -> None:
    session, frontend = make_session(keys=[Control(Char("q")), Char("x")])

    session.run()

    assert session.editor.buffer_count == 0
    assert frontend.keys == [Char("x")]
    assert frontend.exited


def test_open_file_adds_and_switches(tmp_path: Path) -> None:
    path = tmp_path / "opened.txt"
    path.write_text("from disk", encoding="utf-8")
    session, frontend = make_session(answers=[str(path)])

    session.handle(Control(Char("o")))

    assert session.editor.cur_buf_id() == 1
    assert content(session) == ("from disk",)
    assert frontend.statuses[-1] == f"Editing in buffer #1: {path}"


def test_alt_keys_switch_buffers() -> None:
    session, frontend = make_session("a", "b", "c")

    session.handle(Alt(Char("2")))
    assert session.editor.cur_buf_id() == 2

    session.handle(Alt(Char("'")))
    assert session.editor.cur_buf_id() == 0

    session.handle(Alt(Char('"')))
    assert session.editor.cur_buf_id() == 2
    assert frontend.statuses[-1] == "Editing in buffer #2: unnamed"


def test_eval_prompt_shows_result() -> None:
    session, frontend = make_session(answers=["1 + 2", "nope"])

    session.handle(Control(Char("e")))
    assert frontend.statuses[-1] == "3"

    session.handle(Control(Char("e")))
    assert frontend.statuses[-1] == "Error: SymbolNotDefined: nope"


def test_bindings_take_precedence() -> None:
    session, frontend = make_session()
    session.bind("C-s", 'insert "bound"; get-undo-stack-len ()')
    session.bind(Char("q"), "x = 1")

    session.handle(Control(Char("s")))
    session.handle(Char("q"))

    assert content(session) == ("bound",)
    assert frontend.statuses[-1] == "1"
    assert session.editor.env.lookup("x") == Int(1)

    session.unbind("q")
    session.handle(Char("q"))
    assert content(session) == ("boundq",)


def test_shell_command_output_opens_in_new_buffer() -> None:
    session, _ = make_session(answers=["echo hello"])

    session.handle(Alt(Char("!")))

    assert session.editor.cur_buf_id() == 1
    assert content(session)[:2] == ("STDOUT:", "hello")
    assert "STDERR:" in content(session)


def test_missing_shell_command_reports_failure() -> None:
    session, frontend = make_session(answers=["definitely-not-a-real-command-xyz"])

    session.handle(Alt(Char("!")))

    assert "Failed to run command" in frontend.statuses
    assert session.editor.buffer_count == 1


def test_tab_width_comes_from_config() -> None:
    session, _ = make_session(config=EditorConfig(tab_width=2))

    session.handle(Key.TAB)

    assert content(session) == ("  ",)
