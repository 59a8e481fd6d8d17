"""Plain-text rendering of a todo tree.

`render_tree` draws the whole tree under a `Restriction`, one todo per line using
`Todo.display()`. Top-level todos are printed flush left; nested todos hang off their owner
with box-drawing connectors:

    [ ] 5 plan trip >
    ├── [ ] 3 book flights
    └── [ ] 1 pack >
        └── [ ] 0 socks

When a `NoteStore` is given, note text is printed under its todo, indented one level past the
todo's children. With `minimal=True` connectors are replaced by four spaces per depth level.
"""

from __future__ import annotations

from .notes import NoteStore
from .todo import Restriction, TodoList


_BRANCH = "├── "
_LAST = "└── "
_PIPE = "│   "
_SPACE = "    "


def render_tree(
    todo_list: TodoList,
    restriction: Restriction = Restriction.ALL,
    *,
    store: NoteStore | None = None,
    minimal: bool = False,
) -> list[str]:
    lines: list[str] = []
    _render_list(todo_list, restriction, prefix="", top=True, store=store, minimal=minimal, lines=lines)
    return lines


def _render_list(
    todo_list: TodoList,
    restriction: Restriction,
    *,
    prefix: str,
    top: bool,
    store: NoteStore | None,
    minimal: bool,
    lines: list[str],
) -> None:
    todos = todo_list.todos(restriction)
    for i, todo in enumerate(todos):
        last = i == len(todos) - 1
        if top:
            connector = ""
            child_prefix = ""
        elif minimal:
            connector = _SPACE
            child_prefix = prefix + _SPACE
        else:
            connector = _LAST if last else _BRANCH
            child_prefix = prefix + (_SPACE if last else _PIPE)
        lines.append(prefix + connector + todo.display())

        if todo.todo_list is not None:
            _render_list(
                todo.todo_list,
                restriction,
                prefix=child_prefix,
                top=False,
                store=store,
                minimal=minimal,
                lines=lines,
            )
        if store is not None and todo.note_hash is not None:
            for note_line in todo.note(store).splitlines():
                lines.append(child_prefix + _SPACE + note_line)
