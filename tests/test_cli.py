"""Tests for the inote CLI."""

import json
import re
from pathlib import Path

import pytest
from typer.testing import CliRunner

from inote.cli import app

runner = CliRunner()

CREATED_PATTERN = re.compile(r"Note '(note-\d+-[0-9a-z]{7})' created successfully\.")


@pytest.fixture
def root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.delenv("INOTE_STORAGE_KEY", raising=False)
    monkeypatch.setenv("INOTE_LOG_LEVEL", "WARNING")
    return str(tmp_path / "inote_root")


def _invoke(root: str, *args: str):
    return runner.invoke(app, ["--root", root, *args], catch_exceptions=False)


def _add(root: str, *args: str) -> str:
    result = _invoke(root, "add", *args)
    assert result.exit_code == 0, result.output
    match = CREATED_PATTERN.search(result.stdout)
    assert match, result.stdout
    return match.group(1)


def test_add_and_list(root: str) -> None:
    milk = _add(root, "Buy milk", "--category", "personal")
    sprint = _add(root, "Sprint plan", "--category", "work")

    result = _invoke(root, "list")
    assert result.exit_code == 0
    lines = result.stdout.strip().splitlines()
    assert lines == [
        f"- {sprint}: Sprint plan [Work Ideas]",
        f"- {milk}: Buy milk [Personal]",
    ]

    result = _invoke(root, "list", "--category", "work")
    assert result.stdout.strip() == f"- {sprint}: Sprint plan [Work Ideas]"

    result = _invoke(root, "list", "--search", "MILK")
    assert result.stdout.strip() == f"- {milk}: Buy milk [Personal]"


def test_list_empty(root: str) -> None:
    result = _invoke(root, "list")
    assert result.exit_code == 0
    assert "No notes found." in result.stdout


def test_add_with_all_fields_and_show(root: str) -> None:
    note_id = _add(
        root,
        "Trip",
        "--content",
        "Pack bags",
        "--priority",
        "high",
        "--tag",
        "todo",
        "--tag",
        "important",
        "--image",
        "file:///map.png",
        "--background-color",
        "#E1F5FE",
        "--text-color",
        "#2196F3",
        "--font-size",
        "50",
    )

    result = _invoke(root, "show", note_id)
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["id"] == note_id
    assert payload["content"] == "Pack bags"
    assert payload["tags"] == ["todo", "important"]
    assert payload["images"] == ["file:///map.png"]
    assert payload["backgroundColor"] == "#E1F5FE"
    assert payload["textColor"] == "#2196F3"
    assert payload["fontSize"] == 32
    assert payload["priorityColor"] == "#FF5252"


def test_add_blank_title_fails(root: str) -> None:
    result = _invoke(root, "add", "   ")
    assert result.exit_code == 1
    assert "Please enter a title" in result.output

    assert "No notes found." in _invoke(root, "list").stdout


def test_edit_updates_fields_and_toggles_tags(root: str) -> None:
    note_id = _add(root, "Draft", "--tag", "ideas")

    result = _invoke(
        root,
        "edit",
        note_id,
        "--title",
        "Final",
        "--tag",
        "ideas",
        "--tag",
        "work",
        "--image",
        "file:///x.png",
    )
    assert result.exit_code == 0, result.output

    payload = json.loads(_invoke(root, "show", note_id).stdout)
    assert payload["title"] == "Final"
    assert payload["tags"] == ["work"]
    assert payload["images"] == ["file:///x.png"]


def test_edit_applies_formats(root: str) -> None:
    note_id = _add(root, "Draft", "--content", "Body")

    result = _invoke(root, "edit", note_id, "--format", "bold", "--format", "list")
    assert result.exit_code == 0, result.output

    payload = json.loads(_invoke(root, "show", note_id).stdout)
    assert payload["content"] == "Body**bold text**\n- List item"


def test_edit_unknown_format_saves_nothing(root: str) -> None:
    note_id = _add(root, "Draft", "--content", "Body")

    result = _invoke(root, "edit", note_id, "--title", "Changed", "--format", "blink")
    assert result.exit_code == 1
    assert "Unknown format" in result.output

    payload = json.loads(_invoke(root, "show", note_id).stdout)
    assert payload["title"] == "Draft"
    assert payload["content"] == "Body"


def test_edit_missing_note(root: str) -> None:
    result = _invoke(root, "edit", "note-1-missing", "--title", "x")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_favorite_commands(root: str) -> None:
    note_id = _add(root, "Star me")

    assert _invoke(root, "favorite", note_id).exit_code == 0
    assert _invoke(root, "list", "--favorites").stdout.strip() == (
        f"- {note_id}: Star me *"
    )

    result = _invoke(root, "toggle-favorite", note_id)
    assert "favorite: no" in result.stdout
    assert "No notes found." in _invoke(root, "list", "--favorites").stdout

    assert _invoke(root, "favorite", note_id).exit_code == 0
    assert _invoke(root, "favorite", note_id, "--off").exit_code == 0
    assert json.loads(_invoke(root, "show", note_id).stdout)["isFavorite"] is False


def test_toggle_favorite_missing(root: str) -> None:
    result = _invoke(root, "toggle-favorite", "note-1-missing")
    assert result.exit_code == 1


def test_favorite_missing(root: str) -> None:
    for flags in ((), ("--off",)):
        result = _invoke(root, "favorite", "note-1-missing", *flags)
        assert result.exit_code == 1
        assert "not found" in result.output
        assert "favorites." not in result.output


def test_delete(root: str) -> None:
    note_id = _add(root, "Temporary")

    result = _invoke(root, "delete", note_id)
    assert result.exit_code == 0
    assert f"Note '{note_id}' deleted." in result.stdout
    assert "No notes found." in _invoke(root, "list").stdout

    # Deleting again is not an error, but says nothing was removed.
    result = _invoke(root, "delete", note_id)
    assert result.exit_code == 0
    assert f"Note '{note_id}' not found; nothing deleted." in result.stdout
    assert f"Note '{note_id}' deleted." not in result.stdout


def test_invalid_id_is_rejected(root: str) -> None:
    result = _invoke(root, "show", "../etc")
    assert result.exit_code == 1
    assert "Invalid note_id" in result.output


def test_counts(root: str) -> None:
    _add(root, "a", "--category", "work")
    _add(root, "b", "--category", "work")
    _add(root, "c", "--category", "projects")

    lines = _invoke(root, "counts").stdout.strip().splitlines()
    assert lines == [
        "All Notes: 3",
        "Work Ideas: 2",
        "Personal: 0",
        "Future Projects: 1",
    ]


def test_corrupt_storage_degrades_to_empty_list(root: str) -> None:
    Path(root).mkdir(parents=True)
    (Path(root) / "notes.json").write_text("{broken", encoding="utf-8")

    result = _invoke(root, "list")
    assert result.exit_code == 0
    assert "No notes found." in result.stdout

    result = _invoke(root, "add", "Would overwrite")
    assert result.exit_code == 1
    assert (Path(root) / "notes.json").read_text(encoding="utf-8") == "{broken"


def test_custom_key(root: str) -> None:
    result = runner.invoke(
        app,
        ["--root", root, "--key", "@inote-storage-dev", "add", "Keyed"],
        catch_exceptions=False,
    )
    assert result.exit_code == 0
    assert (Path(root) / "@inote-storage-dev.json").exists()


def test_root_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INOTE_ROOT", str(tmp_path / "env_root"))
    monkeypatch.setenv("INOTE_LOG_LEVEL", "WARNING")

    result = runner.invoke(app, ["add", "From env"], catch_exceptions=False)

    assert result.exit_code == 0
    assert (tmp_path / "env_root" / "notes.json").exists()


def test_vocab() -> None:
    result = runner.invoke(app, ["vocab"])
    assert result.exit_code == 0
    assert "work: Work Ideas" in result.stdout
    assert "high: High (#FF5252)" in result.stdout
    assert "todo: To-Do" in result.stdout
