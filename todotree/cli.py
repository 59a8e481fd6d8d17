"""todotree.cli

Non-interactive front end for the todo tree.

Entry points
- `todotree.cli:main`
- `python3 -m todotree ...` (delegates to this module)

Usage (conceptual)
- `python3 -m todotree` prints the undone top-level todos
- `python3 -m todotree -a "buy milk" -a "call mom"` appends todos and saves
- `python3 -m todotree --tree --restriction all` prints the whole tree, notes included
- `python3 -m todotree -s call` prints every match with its tree path

Flags
- `-a/--append MESSAGE`: add a todo at the end of the root list (repeatable).
- `-A/--prepend MESSAGE`: add a todo at the front of the root list (repeatable).
- `--append-file PATH`: import the top-level todos of another tree file.
- `-s/--search QUERY`: print matches as `<path>  <todo>`, where `<path>` is the dotted tree
  path of the matched todo (e.g. `1.0`).
- `--done` / `--delete`: act on every todo matched by `-s`. The matches are printed as they
  were found, before the command ran.
- `--tree` / `--minimal-tree` / `--stdout`: print the tree with connectors, with plain
  indentation, or in the raw file encoding. Default is the flat root list.
- `--restriction {all,undone,done,daily,undone_or_daily}`: filter (default: `undone`).
- `--data-dir DIR`: data directory; otherwise `$TODOTREE_DATA_DIR` or
  `~/.local/share/todotree`.

The tree file is rewritten only when one of the adding or selection flags changed it.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .codec import dumps_tree
from .render import render_tree
from .search import TreeSearch
from .todo import Restriction, Todo
from .tree import TodoConfig, TodoTree


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="todotree", description="Hierarchical todo list.")
    p.add_argument(
        "-a",
        "--append",
        action="append",
        default=[],
        metavar="MESSAGE",
        help="Add a todo at the end of the root list (repeatable).",
    )
    p.add_argument(
        "-A",
        "--prepend",
        action="append",
        default=[],
        metavar="MESSAGE",
        help="Add a todo at the front of the root list (repeatable).",
    )
    p.add_argument(
        "--append-file",
        default=None,
        help="Import the top-level todos of another todo file.",
    )
    p.add_argument(
        "-s",
        "--search",
        default=None,
        help="Print every todo whose message contains QUERY (case-insensitive).",
    )
    p.add_argument(
        "--done",
        action="store_true",
        help="Mark every todo matched by --search as done.",
    )
    p.add_argument(
        "--delete",
        action="store_true",
        help="Delete every todo matched by --search (with its sub-list and note).",
    )
    output_group = p.add_mutually_exclusive_group()
    output_group.add_argument(
        "--tree",
        action="store_true",
        help="Print the whole tree with box-drawing connectors.",
    )
    output_group.add_argument(
        "--minimal-tree",
        action="store_true",
        help="Print the whole tree with plain indentation.",
    )
    output_group.add_argument(
        "--stdout",
        action="store_true",
        help="Print the raw todo file encoding.",
    )
    p.add_argument(
        "--restriction",
        choices=[r.value for r in Restriction],
        default=Restriction.UNDONE.value,
        help="Which todos to show (default: undone).",
    )
    p.add_argument(
        "--data-dir",
        default=None,
        help="Data directory holding the todo file and notes (default: $TODOTREE_DATA_DIR or ~/.local/share/todotree).",
    )
    return p


def _format_path(path: list[int]) -> str:
    return ".".join(str(i) for i in path)


def _mark_done(tree: TodoTree, todos: list[Todo]) -> None:
    for todo in todos:
        location = tree.locate(todo)
        if location is None or todo.done:
            continue
        path, index = location
        tree.toggle_done(path, index)


def _delete(tree: TodoTree, todos: list[Todo]) -> None:
    for todo in todos:
        # gone already when an ancestor was deleted first
        location = tree.locate(todo)
        if location is None:
            continue
        path, index = location
        tree.delete(path, index)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(sys.argv[1:] if argv is None else argv))
    if (args.done or args.delete) and args.search is None:
        parser.error("--done and --delete need --search")

    if args.data_dir:
        cfg = TodoConfig(data_dir=Path(args.data_dir).expanduser().resolve())
    else:
        cfg = TodoConfig.from_env()
    tree = TodoTree.load(cfg)
    restriction = Restriction(args.restriction)

    for message in args.append:
        tree.push([], message)
    for message in args.prepend:
        tree.prepend([], message)
    if args.append_file:
        tree.append_from_file(Path(args.append_file).expanduser())

    selected: list[Todo] = []
    found: list[str] = []
    if args.search is not None:
        search = TreeSearch()
        search.search(args.search, tree.root, restriction)
        for group in search.groups:
            todos = tree.list_at(group.tree_path, restriction).todos(restriction)
            for index in group.matching_indices:
                selected.append(todos[index])
                found.append(f"{_format_path([*group.tree_path, index])}  {todos[index].display()}")
    if args.done:
        _mark_done(tree, selected)
    if args.delete:
        _delete(tree, selected)

    if tree.changed:
        tree.save()
        print(f"[todotree] saved: {cfg.todo_path}", file=sys.stderr)

    if args.search is not None:
        for line in found:
            print(line)
        return 0

    if args.stdout:
        sys.stdout.write(dumps_tree(tree.root))
        return 0

    if args.tree or args.minimal_tree:
        lines = render_tree(tree.root, restriction, store=tree.notes, minimal=bool(args.minimal_tree))
    else:
        lines = tree.root.display(restriction)
    for line in lines:
        print(line)
    return 0
