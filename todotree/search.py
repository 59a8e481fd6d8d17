"""Whole-tree search with wrap-around navigation between matches.

`TreeSearch.search(query, todo_list, restriction)` scans every list in the tree and records
one `SearchGroup` per list that holds at least one match. A group stores the list's tree path
and the matching local indices in the list's filtered enumeration under `restriction`, so
`todo_list.at_path(group.tree_path, restriction).todos(restriction)[i]` is the matched todo.

Traversal
- An explicit work stack is seeded with the root (`[]`).
- Each step pops the most recently pushed list, scans it in enumeration order, records its
  matches, and pushes every nested list it meets (in scan order).
- Groups are recorded in pop order. Consequently the most recently discovered subtree is
  explored first; siblings' subtrees are visited last-to-first. Callers must not assume a
  breadth-first or top-to-bottom order.
- Only a todo's own message is matched (`Todo.matches`, case-insensitive substring). Notes are
  never searched; nested lists are scanned as their own groups.

Navigation
- A fresh search has no current position. The first `next()` lands on the first group's first
  match; the first `prev()` lands on the last group's last match.
- `next()` walks the current group's matches before moving on to the next group and wraps from
  the last match of the last group to the first match of the first group. `prev()` mirrors it.
- With no groups, navigation is a no-op and `current_position()` is None.
- Calling `search()` again discards the previous results and position.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .todo import Restriction, TodoList


@dataclass
class SearchGroup:
    tree_path: list[int]
    matching_indices: list[int] = field(default_factory=list)


class TreeSearch:
    def __init__(self) -> None:
        self.query = ""
        self._groups: list[SearchGroup] = []
        self._group_index = 0
        self._match_index = 0
        self._positioned = False

    def __len__(self) -> int:
        return len(self._groups)

    @property
    def groups(self) -> list[SearchGroup]:
        return list(self._groups)

    @property
    def total_matches(self) -> int:
        return sum(len(g.matching_indices) for g in self._groups)

    def search(self, query: str, todo_list: TodoList, restriction: Restriction = Restriction.ALL) -> None:
        self.query = query
        self._groups = []
        self._group_index = 0
        self._match_index = 0
        self._positioned = False
        if not query:
            return

        stack: list[tuple[list[int], TodoList]] = [([], todo_list)]
        while stack:
            path, current = stack.pop()
            matching: list[int] = []
            for i, todo in enumerate(current.filter(restriction)):
                if todo.matches(query):
                    matching.append(i)
                child = todo.todo_list
                if child is not None:
                    stack.append(([*path, i], child))
            if matching:
                self._groups.append(SearchGroup(tree_path=path, matching_indices=matching))

    def next(self) -> None:
        if not self._groups:
            return
        if not self._positioned:
            self._positioned = True
            self._group_index = 0
            self._match_index = 0
            return
        group = self._groups[self._group_index]
        if self._match_index + 1 < len(group.matching_indices):
            self._match_index += 1
        elif self._group_index + 1 < len(self._groups):
            self._group_index += 1
            self._match_index = 0
        else:
            self._group_index = 0
            self._match_index = 0

    def prev(self) -> None:
        if not self._groups:
            return
        if self._positioned and self._match_index > 0:
            self._match_index -= 1
            return
        if self._positioned and self._group_index > 0:
            self._group_index -= 1
        else:
            self._group_index = len(self._groups) - 1
        self._positioned = True
        self._match_index = len(self._groups[self._group_index].matching_indices) - 1

    def current_position(self) -> tuple[int, list[int]] | None:
        """Return `(local_index, tree_path)` of the current match, or None."""
        if not self._groups or not self._positioned:
            return None
        group = self._groups[self._group_index]
        return group.matching_indices[self._match_index], list(group.tree_path)
