"""todotree.todo

The in-memory task model: `Todo` items owned by `TodoList` containers, nested to any depth.

Shape
- A `TodoList` holds two ordered sequences, `undone` and `done`. Each `Todo` lives in exactly
  one sequence of exactly one list; nothing is shared, so the structure is always a tree.
- A `Todo` carries `message`, `priority` (0..9, higher is more urgent), `done`, `daily` and a
  single `dependency` slot holding one of:
  - `None`
  - `Note(hash)`: a reference to a blob in `todotree.notes.NoteStore`
  - `TodoList`: an owned nested list
  Because there is one slot, a todo can never own a note and a list at the same time.
  `add_note` / `add_dependency` raise `DependencyConflict` when the other variant is present.

Invariants
- Partition: every todo in `undone` has `done == False`; every todo in `done` has
  `done == True`. Flipping a flag breaks this until `fix_undone()` / `fix_done()` run.
  The two fixers are deliberately separate: callers that hide completed todos only run
  `fix_undone()`, which leaves reopened todos parked in `done`.
- Ordering: `undone` is sorted by descending priority with stable ties. `done` keeps
  completion order. `push` / `prepend` bypass the ordering for quick capture; `sort()`
  restores it.

Reordering (`TodoList.reorder(index)`)
The todo at `undone[index]` is moved the shortest distance that puts it back inside its
priority band:
- already inside the band: it stays where it is,
- priority raised: it lands at the tail of the band it joins,
- priority lowered: it lands at the head of the band it joins.
The new index is returned so index-based cursors can follow the todo.

Indexing and tree paths
- `todo_list[i]` addresses `undone` first and then `done`.
- A tree path is a list of indices. Each index selects a todo in the filtered enumeration
  (`TodoList.filter(restriction)`) of the current list; the walk continues into that todo's
  nested list. `TodoList.at_path(path)` resolves a path from the list it is called on,
  raising `IndexError` for an index out of range and `NoDependency` for a todo without a
  nested list. Paths are only valid until the next structural mutation along them.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import Enum
from itertools import chain

from .errors import DependencyConflict, NoDependency, NoNote
from .notes import NoteStore


MIN_PRIORITY = 0
MAX_PRIORITY = 9


def clamp_priority(value: int) -> int:
    return max(MIN_PRIORITY, min(MAX_PRIORITY, int(value)))


def _single_line(text: str) -> str:
    return " ".join(str(text).replace("\r\n", "\n").replace("\r", "\n").split("\n"))


class Restriction(str, Enum):
    ALL = "all"
    UNDONE = "undone"
    DONE = "done"
    DAILY = "daily"
    UNDONE_OR_DAILY = "undone_or_daily"

    def allows(self, todo: Todo) -> bool:
        if self is Restriction.UNDONE:
            return not todo.done
        if self is Restriction.DONE:
            return todo.done
        if self is Restriction.DAILY:
            return todo.daily
        if self is Restriction.UNDONE_OR_DAILY:
            return (not todo.done) or todo.daily
        return True


@dataclass(frozen=True)
class Note:
    hash: str


@dataclass
class Todo:
    message: str
    priority: int = 0
    done: bool = False
    daily: bool = False
    dependency: Note | TodoList | None = None

    def __post_init__(self) -> None:
        self.message = _single_line(self.message)
        self.priority = clamp_priority(self.priority)

    @property
    def todo_list(self) -> TodoList | None:
        if isinstance(self.dependency, TodoList):
            return self.dependency
        return None

    @property
    def note_hash(self) -> str | None:
        if isinstance(self.dependency, Note):
            return self.dependency.hash
        return None

    def has_dependency(self) -> bool:
        return self.todo_list is not None

    def has_note(self) -> bool:
        return self.note_hash is not None

    def set_message(self, message: str) -> None:
        self.message = _single_line(message)

    def toggle_done(self) -> None:
        self.done = not self.done

    def toggle_daily(self) -> None:
        self.daily = not self.daily

    def set_priority(self, value: int) -> None:
        self.priority = clamp_priority(value)

    def increase_priority(self) -> None:
        self.set_priority(self.priority + 1)

    def decrease_priority(self) -> None:
        self.set_priority(self.priority - 1)

    def add_dependency(self) -> TodoList:
        """Attach an empty nested list (or return the existing one)."""
        if isinstance(self.dependency, Note):
            raise DependencyConflict(f"Todo {self.message!r} already has a note")
        if self.dependency is None:
            self.dependency = TodoList()
        return self.dependency

    def remove_dependency(self) -> None:
        if isinstance(self.dependency, TodoList):
            self.dependency = None

    def add_note(self, store: NoteStore, text: str = "") -> str:
        """Allocate a note blob for this todo and return its hash.

        An existing note is kept as is; its hash is returned.
        """
        if isinstance(self.dependency, TodoList):
            raise DependencyConflict(f"Todo {self.message!r} already has a dependency list")
        if isinstance(self.dependency, Note):
            return self.dependency.hash
        hash = store.write(text)
        self.dependency = Note(hash)
        return hash

    def edit_note(self, store: NoteStore, text: str) -> None:
        hash = self.note_hash
        if hash is None:
            raise NoNote(f"Todo {self.message!r} has no note")
        store.write(text, hash)

    def note(self, store: NoteStore) -> str:
        hash = self.note_hash
        if hash is None:
            return ""
        return store.read(hash)

    def remove_note(self, store: NoteStore | None = None) -> None:
        hash = self.note_hash
        if hash is None:
            return
        if store is not None:
            store.delete(hash)
        self.dependency = None

    def matches(self, query: str) -> bool:
        return query.lower() in self.message.lower()

    def display(self) -> str:
        check = "x" if self.done else " "
        daily = " (daily)" if self.daily else ""
        if isinstance(self.dependency, TodoList):
            suffix = " >"
        elif isinstance(self.dependency, Note):
            suffix = " *"
        else:
            suffix = ""
        return f"[{check}] {self.priority} {self.message}{daily}{suffix}"


@dataclass
class TodoList:
    undone: list[Todo] = field(default_factory=list)
    done: list[Todo] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.undone) + len(self.done)

    def __iter__(self) -> Iterator[Todo]:
        return chain(self.undone, self.done)

    def __getitem__(self, index: int) -> Todo:
        if 0 <= index < len(self.undone):
            return self.undone[index]
        if len(self.undone) <= index < len(self):
            return self.done[index - len(self.undone)]
        raise IndexError(f"Todo index out of range: {index}")

    def is_empty(self) -> bool:
        return not self.undone and not self.done

    def filter(self, restriction: Restriction = Restriction.ALL) -> Iterator[Todo]:
        return (todo for todo in self if restriction.allows(todo))

    def todos(self, restriction: Restriction = Restriction.ALL) -> list[Todo]:
        return list(self.filter(restriction))

    def messages(self) -> list[str]:
        return [todo.message for todo in self]

    def display(self, restriction: Restriction = Restriction.ALL) -> list[str]:
        return [todo.display() for todo in self.filter(restriction)]

    def fix_undone(self) -> None:
        """Move completed todos from `undone` to the end of `done`."""
        still_undone: list[Todo] = []
        for todo in self.undone:
            if todo.done:
                self.done.append(todo)
            else:
                still_undone.append(todo)
        self.undone = still_undone

    def fix_done(self) -> None:
        """Move reopened todos from `done` back into `undone` at their priority position."""
        reopened = [todo for todo in self.done if not todo.done]
        if not reopened:
            return
        self.done = [todo for todo in self.done if todo.done]
        for todo in reopened:
            self.undone.append(todo)
            self.reorder(len(self.undone) - 1)

    def reorder(self, index: int) -> int:
        if not 0 <= index < len(self.undone):
            return index
        todo = self.undone.pop(index)
        size = len(self.undone)
        head = next((i for i, other in enumerate(self.undone) if other.priority <= todo.priority), size)
        tail = next((i for i, other in enumerate(self.undone) if other.priority < todo.priority), size)
        tail = max(head, tail)
        new_index = min(max(index, head), tail)
        self.undone.insert(new_index, todo)
        return new_index

    def sort(self) -> None:
        self.undone.sort(key=lambda todo: -todo.priority)

    def add(self, todo: Todo) -> int:
        """Insert `todo` at its ordering position and return its combined index."""
        if todo.done:
            self.done.append(todo)
            return len(self) - 1
        self.undone.append(todo)
        return self.reorder(len(self.undone) - 1)

    def push(self, todo: Todo) -> int:
        if todo.done:
            self.done.append(todo)
            return len(self) - 1
        self.undone.append(todo)
        return len(self.undone) - 1

    def prepend(self, todo: Todo) -> int:
        if todo.done:
            self.done.insert(0, todo)
            return len(self.undone)
        self.undone.insert(0, todo)
        return 0

    def remove(self, index: int) -> Todo:
        if 0 <= index < len(self.undone):
            return self.undone.pop(index)
        if len(self.undone) <= index < len(self):
            return self.done.pop(index - len(self.undone))
        raise IndexError(f"Todo index out of range: {index}")

    def at_path(self, path: Sequence[int], restriction: Restriction = Restriction.ALL) -> TodoList:
        current = self
        for depth, index in enumerate(path):
            todos = current.todos(restriction)
            if not 0 <= index < len(todos):
                raise IndexError(f"Tree path {list(path[: depth + 1])} is out of range")
            child = todos[index].todo_list
            if child is None:
                raise NoDependency(f"Todo at tree path {list(path[: depth + 1])} has no dependency list")
            current = child
        return current

    def parent_todo(self, path: Sequence[int], restriction: Restriction = Restriction.ALL) -> Todo | None:
        """Return the todo owning the list at `path` (None for the root)."""
        if not path:
            return None
        todos = self.at_path(path[:-1], restriction).todos(restriction)
        if not 0 <= path[-1] < len(todos):
            raise IndexError(f"Tree path {list(path)} is out of range")
        return todos[path[-1]]
