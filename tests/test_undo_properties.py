from hypothesis import given, settings
from hypothesis import strategies as st

from quill import Buffer, Direction, Editor

MOTIONS = [Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT]

operations = st.lists(
    st.one_of(
        st.tuples(st.just("insert"), st.text(alphabet="ab\n", min_size=1, max_size=3)),
        st.tuples(st.just("delete"), st.integers(min_value=0, max_value=4)),
        st.tuples(st.just("move"), st.sampled_from(MOTIONS), st.integers(min_value=1, max_value=3)),
        st.tuples(st.just("goto"), st.integers(min_value=0, max_value=3), st.integers(min_value=0, max_value=5)),
    ),
    max_size=12,
)


def make_editor() -> Editor:
    buffer = Buffer.from_text("hello\nquill\n!")
    buffer.set_cursor(1, 2)
    return Editor(buffers=[buffer], load_builtins=False)


def snapshot(editor: Editor) -> tuple:
    buffer = editor.cur_buf()
    return (buffer.content(), buffer.cursor, buffer.selection_range())


def run(editor: Editor, operation: tuple) -> None:
    name, *args = operation
    if name == "insert":
        editor.insert(args[0])
    elif name == "delete":
        editor.delete(args[0])
    elif name == "move":
        editor.move_cursor(args[0], args[1])
    else:
        editor.goto_cursor((args[0], args[1]))


@settings(max_examples=150, deadline=None)
@given(operations)
def test_undo_restores_initial_state(ops: list) -> None:
    editor = make_editor()
    before = snapshot(editor)

    for operation in ops:
        run(editor, operation)
    assert len(editor.cur_buf().undo_stack) == len(ops)

    for _ in ops:
        editor.undo()

    assert snapshot(editor) == before
    assert editor.cur_buf().undo_stack == []


@settings(max_examples=150, deadline=None)
@given(operations, st.integers(min_value=1, max_value=12))
def test_redo_after_undo_restores_state(ops: list, steps: int) -> None:
    editor = make_editor()
    for operation in ops:
        run(editor, operation)
    after = snapshot(editor)
    steps = min(steps, len(ops))

    for _ in range(steps):
        editor.undo()
    for _ in range(steps):
        editor.redo()

    assert snapshot(editor) == after
    assert len(editor.cur_buf().undo_stack) == len(ops)
    assert editor.cur_buf().redo_stack == []


@settings(max_examples=100, deadline=None)
@given(operations, st.lists(st.booleans(), max_size=20))
def test_alternating_undo_redo_never_grows_stacks(ops: list, pattern: list) -> None:
    editor = make_editor()
    for operation in ops:
        run(editor, operation)

    for undo in pattern:
        if undo:
            editor.undo()
        else:
            editor.redo()
        buffer = editor.cur_buf()
        assert len(buffer.undo_stack) + len(buffer.redo_stack) == len(ops)
