"""
Tests for CommandStorage: CRUD, uniqueness, migration and persistence.
"""
import json
import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings, strategies as st, assume

from one_line.core.aliases import sanitize_command_name
from one_line.core.errors import (
    CommandNotFoundError,
    DuplicateAliasError,
    DuplicateNameError,
    EmptyAliasError,
    EmptyNameError,
    EmptyStepsError,
    ReservedAliasError,
    StoreWriteError,
)
from one_line.core.storage import CommandStorage, StoreVersionError, upgrade_snapshot


def never_on_path(alias: str) -> bool:
    return False


@pytest.fixture
def storage(tmp_path):
    return CommandStorage(tmp_path / "store", path_lookup=never_on_path)


def read_file(storage: CommandStorage) -> dict:
    return json.loads(storage.config_file.read_text(encoding="utf-8"))


def test_first_use_creates_empty_store(tmp_path):
    storage = CommandStorage(tmp_path / "nested" / "dir", path_lookup=never_on_path)
    assert storage.config_file.exists()
    assert read_file(storage)["commands"] == []
    assert storage.get_all_commands() == []


def test_add_derives_alias_from_name(storage):
    command = storage.add_command("Build My Program", ["npm run build"])

    assert command.alias == "build-my-program"
    assert command.name == "Build My Program"
    assert command.steps == ["npm run build"]
    assert command.usage_count == 0
    assert command.id
    assert command.created_at


def test_add_persists_record_layout(storage):
    command = storage.add_command("Deploy", ["make build", "make deploy"])

    data = read_file(storage)
    assert data["version"] == 1
    assert data["commands"] == [{
        "id": command.id,
        "name": "Deploy",
        "alias": "deploy",
        "steps": ["make build", "make deploy"],
        "createdAt": command.created_at,
        "usageCount": 0,
    }]


def test_ids_are_unique(storage):
    first = storage.add_command("one", ["echo 1"])
    second = storage.add_command("two", ["echo 2"])
    assert first.id != second.id


def test_insertion_order_is_preserved(storage):
    names = ["zeta", "alpha", "mid"]
    for name in names:
        storage.add_command(name, [f"echo {name}"])

    assert [cmd.name for cmd in storage.get_all_commands()] == names


def test_steps_order_is_preserved_exactly(storage):
    steps = ["  echo first  ", "echo second && echo third", "echo 'quoted; text'"]
    command = storage.add_command("ordered", steps)

    assert storage.get_command_by_id(command.id).steps == steps


# **Feature: command-store, Property 1: Names differing only by case collide**
@settings(max_examples=25, deadline=None)
@given(name=st.text(alphabet="abcdefghijklmnopqrstuvwxyz ", min_size=1, max_size=20))
def test_case_variant_names_collide(name: str):
    """
    Property 1: Names differing only by case collide

    Adding a second command whose name differs from an existing one only by
    case SHALL fail with DuplicateNameError.
    """
    assume(name.strip())
    assume(name.upper() != name.lower())

    with tempfile.TemporaryDirectory() as tmpdir:
        storage = CommandStorage(Path(tmpdir), path_lookup=never_on_path)
        alias = sanitize_command_name(name)
        try:
            storage.add_command(name, ["echo one"], alias=f"x-{alias}")
        except ReservedAliasError:
            assume(False)

        with pytest.raises(DuplicateNameError):
            storage.add_command(name.upper(), ["echo two"], alias=f"y-{alias}")

        assert len(storage.get_all_commands()) == 1


def test_names_colliding_after_sanitization_are_duplicates(storage):
    storage.add_command("Build My Program", ["echo"])
    with pytest.raises(DuplicateNameError):
        storage.add_command("build-my-program", ["echo"], alias="other")


def test_duplicate_alias_rejected(storage):
    storage.add_command("first", ["echo 1"], alias="shared")
    with pytest.raises(DuplicateAliasError):
        storage.add_command("second", ["echo 2"], alias="shared")


def test_explicit_alias_is_sanitized(storage):
    command = storage.add_command("Anything", ["echo"], alias="My Alias!")
    assert command.alias == "my-alias"


def test_reserved_alias_rejected_with_three_suggestions(storage):
    before = storage.config_file.read_bytes()

    with pytest.raises(ReservedAliasError) as excinfo:
        storage.add_command("Git", ["git status"])

    suggestions = excinfo.value.suggestions
    assert len(suggestions) == 3
    assert len(set(suggestions)) == 3
    assert "git" not in suggestions
    assert storage.config_file.read_bytes() == before


def test_name_without_alias_characters_is_empty_alias(storage):
    with pytest.raises(EmptyAliasError):
        storage.add_command("!!!", ["echo"])
    assert storage.get_all_commands() == []


@pytest.mark.parametrize("name", ["", "   "])
def test_empty_name_rejected(storage, name):
    with pytest.raises(EmptyNameError):
        storage.add_command(name, ["echo"])


@pytest.mark.parametrize("steps", [[], ["   "], ["echo ok", ""]])
def test_empty_steps_rejected(storage, steps):
    with pytest.raises(EmptyStepsError):
        storage.add_command("valid", steps)
    assert storage.get_all_commands() == []


def test_path_collision_does_not_block(tmp_path):
    storage = CommandStorage(tmp_path, path_lookup=lambda alias: True)
    command = storage.add_command("Deploy", ["echo"])
    assert command.alias == "deploy"


def test_lookups_ignore_case(storage):
    command = storage.add_command("Build My Program", ["echo"])

    assert storage.get_command_by_name("build my program").id == command.id
    assert storage.get_command_by_alias("BUILD-MY-PROGRAM").id == command.id
    assert storage.get_command_by_id(command.id).name == "Build My Program"
    assert storage.get_command_by_name("missing") is None
    assert storage.get_command_by_alias("missing") is None
    assert storage.get_command_by_id("missing") is None


def test_update_renames_and_keeps_alias(storage):
    command = storage.add_command("Old Name", ["echo"])

    updated = storage.update_command(command.id, name="New Name")

    assert updated.name == "New Name"
    assert updated.alias == "old-name"
    assert storage.get_command_by_id(command.id).name == "New Name"


def test_update_replaces_steps(storage):
    command = storage.add_command("task", ["echo 1"])

    storage.update_command(command.id, steps=["echo 2", "echo 3"])

    assert storage.get_command_by_id(command.id).steps == ["echo 2", "echo 3"]


def test_update_to_own_name_with_different_case_is_allowed(storage):
    command = storage.add_command("task", ["echo"])
    assert storage.update_command(command.id, name="TASK").name == "TASK"


def test_update_duplicate_name_leaves_record_unchanged(storage):
    storage.add_command("x", ["echo x"])
    target = storage.add_command("target", ["echo t"])

    with pytest.raises(DuplicateNameError):
        storage.update_command(target.id, name="X")

    assert storage.get_command_by_id(target.id).name == "target"


def test_update_unknown_id(storage):
    with pytest.raises(CommandNotFoundError):
        storage.update_command("nope", name="anything")


def test_update_rejects_empty_values(storage):
    command = storage.add_command("task", ["echo"])
    with pytest.raises(EmptyNameError):
        storage.update_command(command.id, name=" ")
    with pytest.raises(EmptyStepsError):
        storage.update_command(command.id, steps=[])
    assert storage.get_command_by_id(command.id).steps == ["echo"]


def test_increment_usage(storage):
    command = storage.add_command("task", ["echo"])

    storage.increment_usage_count(command.id)
    storage.increment_usage_count(command.id)

    assert storage.get_command_by_id(command.id).usage_count == 2


def test_increment_usage_unknown_id_is_noop(storage):
    storage.add_command("task", ["echo"])
    before = storage.config_file.read_bytes()

    storage.increment_usage_count("missing")

    assert storage.config_file.read_bytes() == before


def test_delete(storage):
    keep = storage.add_command("keep", ["echo"])
    drop = storage.add_command("drop", ["echo"])

    assert storage.delete_command(drop.id) is True
    assert [cmd.id for cmd in storage.get_all_commands()] == [keep.id]


def test_delete_missing_id_leaves_snapshot_unchanged(storage):
    storage.add_command("keep", ["echo"])
    before = storage.get_all_commands()
    raw_before = storage.config_file.read_bytes()

    assert storage.delete_command("missing") is False

    assert storage.get_all_commands() == before
    assert storage.config_file.read_bytes() == raw_before


def test_delete_by_name(storage):
    storage.add_command("Drop Me", ["echo"])
    assert storage.delete_command_by_name("drop me") is True
    assert storage.delete_command_by_name("drop me") is False


def test_clear(storage):
    storage.add_command("a", ["echo"])
    storage.add_command("b", ["echo"])

    storage.clear_all_commands()

    assert storage.get_all_commands() == []
    assert read_file(storage)["commands"] == []


@pytest.mark.parametrize("content", [
    "not json at all",
    "[]",
    '{"commands": {"a": 1}}',
    '{"commands": [{"id": "1", "name": "x"}]}',
    '{"commands": [{"id": "1", "name": "x", "alias": "x", "steps": []}]}',
    '{"version": 99, "commands": []}',
])
def test_corrupt_store_reads_as_empty(storage, content):
    storage.config_file.write_text(content, encoding="utf-8")
    assert storage.get_all_commands() == []


def test_missing_file_reads_as_empty(storage):
    storage.config_file.unlink()
    assert storage.get_all_commands() == []


def test_legacy_records_get_alias_and_usage_on_load(storage):
    legacy = {
        "commands": [
            {"id": "a1", "name": "Build My Program", "steps": ["make"], "createdAt": "2024-01-01T00:00:00.000Z"},
            {"id": "b2", "name": "Other", "alias": "custom", "steps": ["ls"], "createdAt": "2024-01-02T00:00:00.000Z", "usageCount": 4},
        ]
    }
    storage.config_file.write_text(json.dumps(legacy), encoding="utf-8")

    commands = storage.get_all_commands()

    assert [cmd.alias for cmd in commands] == ["build-my-program", "custom"]
    assert [cmd.usage_count for cmd in commands] == [0, 4]
    # Migration is not written back on read.
    assert "alias" not in read_file(storage)["commands"][0]


def test_upgrade_snapshot_leaves_input_untouched():
    raw = {"commands": [{"id": "1", "name": "Hello World", "steps": ["echo"]}]}

    upgraded = upgrade_snapshot(raw)

    assert upgraded[0]["alias"] == "hello-world"
    assert upgraded[0]["usageCount"] == 0
    assert "alias" not in raw["commands"][0]


def test_add_after_corrupt_store_starts_fresh(storage):
    storage.config_file.write_text("{broken", encoding="utf-8")

    storage.add_command("fresh", ["echo"])

    assert [cmd.name for cmd in storage.get_all_commands()] == ["fresh"]


def test_no_temp_files_left_behind(storage):
    storage.add_command("a", ["echo"])
    storage.add_command("b", ["echo"])

    leftovers = [p.name for p in storage.config_file.parent.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []


def test_separate_handles_share_the_file(tmp_path):
    first = CommandStorage(tmp_path, path_lookup=never_on_path)
    second = CommandStorage(tmp_path, path_lookup=never_on_path)

    command = first.add_command("shared", ["echo"])

    assert second.get_command_by_id(command.id) is not None


def test_upgrade_snapshot_rejects_newer_version():
    with pytest.raises(StoreVersionError):
        upgrade_snapshot({"version": 2, "commands": []})


NEWER_STORE = json.dumps({
    "version": 2,
    "commands": [{"id": "n1", "name": "future", "alias": "future", "steps": ["echo"], "extra": {}}],
})


@pytest.mark.parametrize("mutate", [
    lambda s: s.add_command("new", ["echo"]),
    lambda s: s.update_command("n1", name="renamed"),
    lambda s: s.increment_usage_count("n1"),
    lambda s: s.delete_command("n1"),
    lambda s: s.clear_all_commands(),
])
def test_store_from_newer_release_is_never_overwritten(storage, mutate):
    storage.config_file.write_text(NEWER_STORE, encoding="utf-8")

    with pytest.raises(StoreWriteError):
        mutate(storage)

    assert storage.config_file.read_text(encoding="utf-8") == NEWER_STORE
    assert storage.get_all_commands() == []
