"""todotree: a hierarchical todo list with nested sub-lists and notes.

Every todo may own either a nested todo list (a "dependency list") or a free-text note stored
by hash in a notes directory. The package provides the data model and its algorithms; a front
end (the bundled CLI, or a terminal UI) drives it through tree paths.

Modules
- `todotree.todo`: `Todo`, `TodoList` (partition fixing, priority reordering, path lookup),
  `Restriction` filters.
- `todotree.notes`: `NoteStore`, hash-addressed note blobs.
- `todotree.codec`: the single-line clipboard encoding and the tab-indented tree file.
- `todotree.search`: `TreeSearch`, whole-tree search with wrap-around navigation.
- `todotree.tree`: `TodoTree` / `TodoConfig`, the document a front end edits and saves.
- `todotree.render`: plain-text tree rendering.
- `todotree.cli`: `python -m todotree`.

Key exports from this module
- `__version__`: the package version string. (`__all__` is intentionally limited to this.)

Important invariants
- In every list, `undone` holds only undone todos and `done` only done todos once the list has
  been re-partitioned after a toggle.
- `undone` is ordered by descending priority (0..9) with stable ties.
- A todo never has a note and a nested list at the same time.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
