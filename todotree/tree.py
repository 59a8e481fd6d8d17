"""The todo document: a root `TodoList` bound to its file, its note store and a dirty flag.

`TodoTree` is what a front end (terminal UI, CLI) drives. It owns no cursor; every operation
takes the tree path of the list it acts on plus, where relevant, the combined index of a todo
inside that list (`undone` first, then `done`). Operations that move a todo return its new
index so the caller can keep its cursor on it.

Configuration
`TodoConfig` is passed in explicitly; nothing in the core looks up the home directory.
- `todo_path`: `<data_dir>/todo`, the tree file (see `todotree.codec`)
- `notes_dir`: `<data_dir>/notes`, one blob per note hash
`TodoConfig.from_env()` is only used by the CLI: `$TODOTREE_DATA_DIR` when set, otherwise
`~/.local/share/todotree`.

Persistence
- `TodoTree.load(cfg)` / `reload()` read the tree file. Malformed lines are skipped; their
  warnings are kept in `warnings` and printed to stderr with a `[todotree]` prefix.
- `save()` rewrites the whole file and clears `changed`. An `OSError` propagates and leaves
  both the in-memory tree and `changed` as they were.

Completion cascade (`toggle_done`)
After a todo is toggled, its list is re-partitioned (`fix_undone`, plus `fix_done` when the
caller shows completed todos). If that list now has nothing undone but something done, the
todo owning it is marked done too and the same check runs one level up. The walk stops at the
root, at a list that still has undone work, or at an owner that is already done. The path of
the list where it stopped is returned; callers should clamp their index against it.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .codec import decode_from_clipboard, encode_for_clipboard, read_tree, write_tree
from .errors import NoNote
from .notes import NoteStore
from .todo import Restriction, Todo, TodoList


@dataclass(frozen=True)
class TodoConfig:
    data_dir: Path

    @property
    def todo_path(self) -> Path:
        return self.data_dir / "todo"

    @property
    def notes_dir(self) -> Path:
        return self.data_dir / "notes"

    @staticmethod
    def from_env() -> "TodoConfig":
        env = os.environ.get("TODOTREE_DATA_DIR")
        data_dir = Path(env) if env else Path.home() / ".local" / "share" / "todotree"
        return TodoConfig(data_dir=data_dir.expanduser().resolve())


class TodoTree:
    def __init__(self, cfg: TodoConfig, root: TodoList | None = None) -> None:
        self.cfg = cfg
        self.root = root if root is not None else TodoList()
        self.notes = NoteStore(cfg.notes_dir)
        self.changed = False
        self.warnings: list[str] = []

    @staticmethod
    def load(cfg: TodoConfig) -> "TodoTree":
        tree = TodoTree(cfg)
        tree.reload()
        return tree

    def reload(self) -> None:
        result = read_tree(self.cfg.todo_path)
        self.root = result.todo_list
        self.warnings = list(result.warnings)
        self.changed = False
        for warning in self.warnings:
            print(f"[todotree] warning: {self.cfg.todo_path}: {warning}", file=sys.stderr)

    def save(self) -> None:
        write_tree(self.root, self.cfg.todo_path)
        self.changed = False

    def append_from_file(self, path: Path) -> list[str]:
        """Add every top-level todo of another tree file to the root list."""
        result = read_tree(path)
        for warning in result.warnings:
            print(f"[todotree] warning: {path}: {warning}", file=sys.stderr)
        for todo in result.todo_list:
            self.root.add(todo)
            self.changed = True
        return list(result.warnings)

    def list_at(self, path: Sequence[int], restriction: Restriction = Restriction.ALL) -> TodoList:
        return self.root.at_path(path, restriction)

    def todo_at(self, path: Sequence[int], index: int) -> Todo:
        return self.list_at(path)[index]

    def parent_of(self, path: Sequence[int]) -> Todo | None:
        return self.root.parent_todo(path)

    def locate(self, todo: Todo) -> tuple[list[int], int] | None:
        """Return the (tree path, combined index) currently holding `todo`, or None."""
        stack: list[tuple[list[int], TodoList]] = [([], self.root)]
        while stack:
            path, todo_list = stack.pop()
            for i, candidate in enumerate(todo_list):
                if candidate is todo:
                    return path, i
                if candidate.todo_list is not None:
                    stack.append(([*path, i], candidate.todo_list))
        return None

    def title(self, path: Sequence[int], *, show_done: bool = False) -> str:
        todo_list = self.list_at(path)
        size = len(todo_list) if show_done else len(todo_list.undone)
        title = f"Todos ({size}){'*' if self.changed else ''}"
        parent = self.parent_of(path)
        if parent is None:
            return title
        return f"{title} {parent.message}"

    def add(self, path: Sequence[int], message: str, priority: int = 0) -> int:
        index = self.list_at(path).add(Todo(message, priority))
        self.changed = True
        return index

    def push(self, path: Sequence[int], message: str, priority: int = 0) -> int:
        index = self.list_at(path).push(Todo(message, priority))
        self.changed = True
        return index

    def prepend(self, path: Sequence[int], message: str, priority: int = 0) -> int:
        index = self.list_at(path).prepend(Todo(message, priority))
        self.changed = True
        return index

    def set_message(self, path: Sequence[int], index: int, message: str) -> None:
        # An empty edit keeps the old message.
        if not message:
            return
        self.todo_at(path, index).set_message(message)
        self.changed = True

    def set_priority(self, path: Sequence[int], index: int, value: int) -> int:
        self.todo_at(path, index).set_priority(value)
        return self._reorder(path, index)

    def increase_priority(self, path: Sequence[int], index: int) -> int:
        self.todo_at(path, index).increase_priority()
        return self._reorder(path, index)

    def decrease_priority(self, path: Sequence[int], index: int) -> int:
        self.todo_at(path, index).decrease_priority()
        return self._reorder(path, index)

    def _reorder(self, path: Sequence[int], index: int) -> int:
        self.changed = True
        return self.list_at(path).reorder(index)

    def toggle_daily(self, path: Sequence[int], index: int) -> None:
        self.todo_at(path, index).toggle_daily()
        self.changed = True

    def toggle_done(self, path: Sequence[int], index: int, *, show_done: bool = False) -> list[int]:
        todo_list = self.list_at(path)
        todo_list[index].toggle_done()
        self.changed = True
        _fix_partition(todo_list, show_done=show_done)

        current = list(path)
        while current and not todo_list.undone and todo_list.done:
            parent_list = self.list_at(current[:-1])
            owner = parent_list[current[-1]]
            if owner.done:
                break
            owner.done = True
            _fix_partition(parent_list, show_done=show_done)
            current = current[:-1]
            todo_list = parent_list
        return current

    def delete(self, path: Sequence[int], index: int) -> Todo:
        todo = self.list_at(path).remove(index)
        self.changed = True
        self._drop_notes(todo)
        return todo

    def cut(self, path: Sequence[int], index: int) -> str:
        return encode_for_clipboard(self.delete(path, index))

    def yank(self, path: Sequence[int], index: int) -> str:
        return encode_for_clipboard(self.todo_at(path, index))

    def paste(self, path: Sequence[int], text: str) -> int:
        """Insert the todo encoded in `text`; a `ParseError` leaves the tree untouched."""
        todo = decode_from_clipboard(text)
        index = self.list_at(path).add(todo)
        self.changed = True
        return index

    def add_dependency(self, path: Sequence[int], index: int) -> TodoList:
        todo_list = self.todo_at(path, index).add_dependency()
        self.changed = True
        return todo_list

    def add_note(self, path: Sequence[int], index: int, text: str = "") -> str:
        hash = self.todo_at(path, index).add_note(self.notes, text)
        self.changed = True
        return hash

    def edit_or_add_note(self, path: Sequence[int], index: int, text: str) -> str:
        todo = self.todo_at(path, index)
        try:
            todo.edit_note(self.notes, text)
        except NoNote:
            hash = todo.add_note(self.notes, text)
            self.changed = True
            return hash
        return todo.note_hash or ""

    def note(self, path: Sequence[int], index: int) -> str:
        return self.todo_at(path, index).note(self.notes)

    def remove_dependents(self, path: Sequence[int], index: int) -> None:
        """Drop the todo's note (deleting its blob) and its nested list."""
        todo = self.todo_at(path, index)
        if todo.note_hash is None and todo.todo_list is None:
            return
        todo.remove_note(self.notes)
        if todo.todo_list is not None:
            for child in todo.todo_list:
                self._drop_notes(child)
            todo.remove_dependency()
        self.changed = True

    def _drop_notes(self, todo: Todo) -> None:
        stack = [todo]
        while stack:
            current = stack.pop()
            current.remove_note(self.notes)
            if current.todo_list is not None:
                stack.extend(current.todo_list)


def _fix_partition(todo_list: TodoList, *, show_done: bool) -> None:
    todo_list.fix_undone()
    if show_done:
        todo_list.fix_done()
