"""Text encodings for todos: single-line clipboard transfer and the persisted tree file.

Todo line
Both encodings share one line body:

    [<priority><x if done><d if daily>] <message>

Fields always appear in that order: `[5] buy milk`, `[0x] filed taxes`, `[3xd] water plants`.
`decode_todo` is the exact inverse of `encode_todo` and raises `ParseError` on anything
else. Dependencies are not part of the line, so a clipboard paste always yields a leaf todo.

Tree file
- One line per todo; depth is the number of leading tab characters.
- Each list writes `undone` and then `done`, so a read restores both sequences in order.
- A todo's nested list follows it one level deeper. An empty nested list is written as a
  single `@list` line one level deeper so the dependency shape survives a round trip.
- A note is written as `@note <hash>` one level deeper. Only the hash is stored; the text
  lives in the note store.
- Blank lines are ignored.
- An undone todo written after done siblings (reopened while completed todos were hidden)
  is read back into `undone` at its priority position, so a read always yields a
  partitioned list.

Reading is tolerant. A missing file is an empty tree. A malformed line, a line indented
deeper than its parent allows, or a dependency line that conflicts with an existing one is
skipped and reported in `ReadResult.warnings`; everything else still loads. Undecodable
bytes (e.g. a file cut off mid-write) are replaced and end up as malformed lines.
Writing always replaces the whole file.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ParseError
from .todo import Note, Todo, TodoList


_TODO_RE = re.compile(r"\[(?P<priority>[0-9])(?P<done>x?)(?P<daily>d?)\](?: (?P<message>.*))?")
_NOTE_RE = re.compile(r"@note (?P<hash>[0-9a-zA-Z]+)")
_LIST_MARKER = "@list"


@dataclass
class ReadResult:
    todo_list: TodoList
    warnings: list[str] = field(default_factory=list)


def encode_todo(todo: Todo) -> str:
    flags = ("x" if todo.done else "") + ("d" if todo.daily else "")
    return f"[{todo.priority}{flags}] {todo.message}"


def decode_todo(text: str, *, line: int | None = None) -> Todo:
    m = _TODO_RE.fullmatch(text)
    if m is None:
        raise ParseError(f"malformed todo: {text!r}", line=line)
    return Todo(
        message=m.group("message") or "",
        priority=int(m.group("priority")),
        done=bool(m.group("done")),
        daily=bool(m.group("daily")),
    )


def encode_for_clipboard(todo: Todo) -> str:
    return encode_todo(todo)


def decode_from_clipboard(text: str) -> Todo:
    if text.endswith("\n"):
        text = text[:-1]
        if text.endswith("\r"):
            text = text[:-1]
    if "\n" in text or "\r" in text:
        raise ParseError("clipboard text must be a single todo line")
    return decode_todo(text)


def dumps_tree(todo_list: TodoList) -> str:
    lines: list[str] = []
    _dump_list(todo_list, depth=0, lines=lines)
    return "".join(f"{line}\n" for line in lines)


def _dump_list(todo_list: TodoList, *, depth: int, lines: list[str]) -> None:
    indent = "\t" * depth
    for todo in todo_list:
        lines.append(indent + encode_todo(todo))
        dependency = todo.dependency
        if isinstance(dependency, Note):
            lines.append(f"{indent}\t@note {dependency.hash}")
        elif isinstance(dependency, TodoList):
            if dependency.is_empty():
                lines.append(f"{indent}\t{_LIST_MARKER}")
            else:
                _dump_list(dependency, depth=depth + 1, lines=lines)


def loads_tree(text: str) -> ReadResult:
    root = TodoList()
    warnings: list[str] = []
    # owners[d] is the last todo read at depth d; a line at depth d needs owners[d - 1].
    owners: list[Todo] = []

    for lineno, raw in enumerate(text.split("\n"), start=1):
        raw = raw.rstrip("\r")
        if not raw.strip():
            continue
        body = raw.lstrip("\t")
        depth = len(raw) - len(body)
        if depth > len(owners):
            warnings.append(f"line {lineno}: indented deeper than its parent, skipped")
            continue
        del owners[depth:]
        parent = owners[depth - 1] if depth else None

        try:
            if body == _LIST_MARKER or _NOTE_RE.fullmatch(body):
                if parent is None:
                    raise ParseError("dependency marker without a parent todo", line=lineno)
                _attach_marker(parent, body, line=lineno)
                continue

            todo = decode_todo(body, line=lineno)
            if parent is None:
                target = root
            elif isinstance(parent.dependency, Note):
                raise ParseError("nested todo under a todo that has a note", line=lineno)
            else:
                target = parent.add_dependency()
        except ParseError as exc:
            warnings.append(str(exc))
            continue

        if todo.done:
            target.done.append(todo)
        elif target.done:
            # reopened while done todos were hidden; saved among its done siblings
            target.add(todo)
        else:
            target.undone.append(todo)
        owners.append(todo)

    return ReadResult(todo_list=root, warnings=warnings)


def _attach_marker(parent: Todo, body: str, *, line: int) -> None:
    if body == _LIST_MARKER:
        if isinstance(parent.dependency, Note):
            raise ParseError("list marker under a todo that has a note", line=line)
        parent.add_dependency()
        return
    m = _NOTE_RE.fullmatch(body)
    if m is None:
        raise ParseError(f"malformed note marker: {body!r}", line=line)
    if parent.dependency is not None:
        raise ParseError("note marker under a todo that already has a dependency", line=line)
    parent.dependency = Note(m.group("hash"))


def read_tree(path: Path) -> ReadResult:
    if not path.exists():
        return ReadResult(todo_list=TodoList())
    return loads_tree(path.read_bytes().decode("utf-8", errors="replace"))


def write_tree(todo_list: TodoList, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_tree(todo_list), encoding="utf-8")
