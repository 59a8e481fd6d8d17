from __future__ import annotations

from pathlib import Path

import pytest

from todotree.codec import dumps_tree
from todotree.errors import DependencyConflict, NoDependency, ParseError
from todotree.todo import Note, Todo, TodoList
from todotree.tree import TodoConfig, TodoTree


def _tree(tmp_path: Path) -> TodoTree:
    return TodoTree(TodoConfig(data_dir=tmp_path / "data"))


def _assert_partitioned(todo_list: TodoList) -> None:
    assert all(not t.done for t in todo_list.undone)
    assert all(t.done for t in todo_list.done)


def test_config_paths_and_env_resolution(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg = TodoConfig(data_dir=tmp_path)
    assert cfg.todo_path == tmp_path / "todo"
    assert cfg.notes_dir == tmp_path / "notes"

    monkeypatch.setenv("TODOTREE_DATA_DIR", str(tmp_path / "env-data"))
    assert TodoConfig.from_env().data_dir == (tmp_path / "env-data").resolve()

    monkeypatch.delenv("TODOTREE_DATA_DIR")
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    assert TodoConfig.from_env().data_dir == (tmp_path / "home" / ".local" / "share" / "todotree").resolve()


def test_toggling_last_child_cascades_to_parent(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "parent")
    tree.add_dependency([], 0)
    tree.add([0], "only child")

    stopped_at = tree.toggle_done([0], 0)

    parent = tree.root.done[0]
    assert stopped_at == []
    assert parent.message == "parent"
    assert parent.done is True
    assert tree.root.undone == []
    assert parent.todo_list is not None
    assert [t.message for t in parent.todo_list.done] == ["only child"]
    _assert_partitioned(tree.root)
    _assert_partitioned(parent.todo_list)
    assert tree.changed is True


def test_cascade_climbs_until_a_list_still_has_undone_work(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "root task")
    tree.add_dependency([], 0)
    tree.add([0], "middle", priority=5)
    tree.add([0], "sibling", priority=1)
    tree.add_dependency([0], 0)
    tree.add([0, 0], "leaf")

    stopped_at = tree.toggle_done([0, 0], 0)

    assert stopped_at == [0]
    level1 = tree.list_at([0])
    assert [t.message for t in level1.undone] == ["sibling"]
    assert [t.message for t in level1.done] == ["middle"]
    assert tree.root.undone[0].done is False


def test_cascade_stops_at_already_done_owner(tmp_path: Path) -> None:
    owner = Todo("owner", done=True)
    nested = owner.add_dependency()
    child = Todo("child")
    nested.undone.append(child)
    tree = TodoTree(TodoConfig(data_dir=tmp_path), root=TodoList(done=[owner]))

    stopped_at = tree.toggle_done([0], 0)

    assert stopped_at == [0]
    assert nested.done == [child]
    assert tree.root.done == [owner]


def test_toggle_back_to_undone_needs_show_done_mode(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "high", priority=5)
    tree.add([], "low", priority=1)
    tree.toggle_done([], 0)
    assert [t.message for t in tree.root.done] == ["high"]

    tree.toggle_done([], 1)
    assert [t.message for t in tree.root.done] == ["high"]
    assert tree.root.done[0].done is False

    tree.toggle_done([], 1)
    tree.toggle_done([], 1, show_done=True)
    assert [t.message for t in tree.root.undone] == ["high", "low"]
    assert tree.root.done == []


def test_priority_operations_return_new_index(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "a", priority=5)
    tree.add([], "b", priority=5)
    tree.add([], "c", priority=2)

    assert tree.set_priority([], 2, 5) == 2
    assert [t.message for t in tree.root.undone] == ["a", "b", "c"]

    assert tree.increase_priority([], 2) == 0
    assert tree.decrease_priority([], 0) == 0
    assert tree.decrease_priority([], 0) == 2
    assert [(t.priority, t.message) for t in tree.root.undone] == [(5, "a"), (5, "b"), (4, "c")]


def test_quick_capture_and_messages(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "sorted", priority=5)
    assert tree.push([], "at end", priority=9) == 1
    assert tree.prepend([], "at front") == 0
    assert tree.root.messages() == ["at front", "sorted", "at end"]

    tree.set_message([], 0, "renamed")
    tree.set_message([], 0, "")
    assert tree.todo_at([], 0).message == "renamed"

    tree.toggle_daily([], 0)
    assert tree.todo_at([], 0).daily is True


def test_yank_cut_and_paste(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "keep", priority=3)
    tree.add([], "move me", priority=7)

    assert tree.yank([], 0) == "[7] move me"
    text = tree.cut([], 0)
    assert text == "[7] move me"
    assert tree.root.messages() == ["keep"]

    tree.add_dependency([], 0)
    assert tree.paste([0], text) == 0
    assert tree.list_at([0]).messages() == ["move me"]


def test_paste_of_malformed_text_leaves_tree_untouched(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "one")
    tree.save()
    before = dumps_tree(tree.root)

    with pytest.raises(ParseError):
        tree.paste([], "not a todo line")

    assert dumps_tree(tree.root) == before
    assert tree.changed is False


def test_notes_through_the_tree(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "noted")

    hash = tree.edit_or_add_note([], 0, "first draft")
    assert tree.note([], 0) == "first draft"
    assert tree.edit_or_add_note([], 0, "second draft") == hash
    assert tree.note([], 0) == "second draft"
    assert tree.add_note([], 0) == hash

    with pytest.raises(DependencyConflict):
        tree.add_dependency([], 0)

    tree.remove_dependents([], 0)
    assert tree.todo_at([], 0).dependency is None
    assert not tree.notes.exists(hash)


def test_remove_dependents_drops_nested_note_blobs(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "parent")
    tree.add_dependency([], 0)
    tree.add([0], "child")
    hash = tree.add_note([0], 0, "nested note")

    tree.remove_dependents([], 0)

    assert tree.todo_at([], 0).dependency is None
    assert not tree.notes.exists(hash)
    with pytest.raises(NoDependency):
        tree.list_at([0])


def test_delete_drops_notes_of_removed_subtree(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "noted")
    hash = tree.add_note([], 0, "bye")

    removed = tree.delete([], 0)

    assert removed.message == "noted"
    assert tree.root.is_empty()
    assert not tree.notes.exists(hash)


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    cfg = TodoConfig(data_dir=tmp_path / "data")
    tree = TodoTree(cfg)
    tree.add([], "buy milk", priority=3)
    tree.add([], "call mom", priority=5)
    tree.add_dependency([], 0)
    tree.add([0], "call uncle")
    tree.toggle_daily([0], 0)
    hash = tree.add_note([], 1, "semi-skimmed")
    tree.add([], "done already")
    tree.toggle_done([], 2)

    tree.save()
    assert tree.changed is False
    loaded = TodoTree.load(cfg)

    assert loaded.root == tree.root
    assert loaded.warnings == []
    assert loaded.todo_at([], 1).dependency == Note(hash)
    assert loaded.note([], 1) == "semi-skimmed"


def test_load_reports_malformed_lines_on_stderr(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = TodoConfig(data_dir=tmp_path)
    cfg.todo_path.write_text("[5] one\n%%% corrupt %%%\n[3] two\n[1] three\n", encoding="utf-8")

    tree = TodoTree.load(cfg)

    assert tree.root.messages() == ["one", "two", "three"]
    assert len(tree.warnings) == 1
    err = capsys.readouterr().err
    assert "[todotree] warning:" in err
    assert "line 2" in err


def test_save_failure_keeps_changed_flag(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    tree = TodoTree(TodoConfig(data_dir=blocker / "data"))
    tree.add([], "unsaved")

    with pytest.raises(OSError):
        tree.save()

    assert tree.changed is True
    assert tree.root.messages() == ["unsaved"]


def test_reload_discards_unsaved_changes(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "saved")
    tree.save()
    tree.add([], "unsaved")

    tree.reload()

    assert tree.root.messages() == ["saved"]
    assert tree.changed is False


def test_append_from_file_adds_top_level_todos(tmp_path: Path) -> None:
    other = tmp_path / "other"
    other.write_text("[2] imported\n\t[1] with child\n[9] urgent\n", encoding="utf-8")
    tree = _tree(tmp_path)
    tree.add([], "existing", priority=5)

    assert tree.append_from_file(other) == []

    assert tree.root.messages() == ["urgent", "existing", "imported"]
    assert tree.list_at([2]).messages() == ["with child"]
    assert tree.changed is True


def test_title_counts_and_names_parent(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "parent")
    tree.add_dependency([], 0)
    tree.add([0], "a")
    tree.add([0], "b")
    tree.toggle_done([0], 1)
    tree.save()

    assert tree.title([]) == "Todos (1)"
    assert tree.title([0]) == "Todos (1) parent"
    assert tree.title([0], show_done=True) == "Todos (2) parent"
    tree.add([], "dirty")
    assert tree.title([]) == "Todos (2)*"


def test_reopened_todo_parked_in_done_reloads_in_priority_order(tmp_path: Path) -> None:
    cfg = TodoConfig(data_dir=tmp_path)
    tree = TodoTree(cfg)
    tree.add([], "high", priority=9)
    tree.add([], "low", priority=1)
    tree.toggle_done([], 0)
    tree.toggle_done([], 1)
    assert [t.message for t in tree.root.done] == ["high"]
    assert tree.root.done[0].done is False

    tree.save()
    loaded = TodoTree.load(cfg)

    assert [(t.priority, t.message) for t in loaded.root.undone] == [(9, "high"), (1, "low")]
    assert loaded.root.done == []
    assert loaded.warnings == []


def test_locate_finds_todos_by_identity(tmp_path: Path) -> None:
    tree = _tree(tmp_path)
    tree.add([], "first", priority=5)
    tree.add([], "second", priority=1)
    tree.add_dependency([], 1)
    tree.add([1], "nested")
    nested = tree.todo_at([1], 0)
    tree.toggle_done([], 0)

    assert tree.locate(nested) == ([0], 0)
    assert tree.locate(tree.root.done[0]) == ([], 1)
    assert tree.locate(Todo("nested")) is None
