"""
Tests for CommandManager: resolution, run results and usage tracking.
"""
import sys

import pytest

from one_line.core.errors import DuplicateNameError, ErrorType, ReservedAliasError
from one_line.core.executor import CommandExecutor
from one_line.core.manager import CommandManager, sort_for_completion
from one_line.core.models import Command
from one_line.core.storage import CommandStorage

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell utilities")


@pytest.fixture
def storage(tmp_path):
    return CommandStorage(tmp_path, path_lookup=lambda alias: False)


@pytest.fixture
def manager(storage):
    return CommandManager(storage, CommandExecutor())


def make_command(alias: str, usage_count: int) -> Command:
    return Command(
        id=alias,
        name=alias,
        alias=alias,
        steps=["true"],
        created_at="2024-01-01T00:00:00+00:00",
        usage_count=usage_count,
    )


def test_run_unknown_id_reports_not_found(manager):
    result = manager.run_command_by_id("missing")

    assert not result.success
    assert result.error_type == ErrorType.NOT_FOUND
    assert result.output == ""
    assert "missing" in result.error
    assert result.failed_step is None


def test_run_unknown_name_reports_not_found(manager):
    result = manager.run_command_by_name("missing")
    assert not result.success
    assert result.error_type == ErrorType.NOT_FOUND


def test_run_unknown_token_reports_not_found(manager):
    assert manager.run("missing").error_type == ErrorType.NOT_FOUND


@posix_only
def test_run_by_name_falls_back_to_alias(manager):
    manager.create_command("Build My Program", ["echo built"])

    by_name = manager.run_command_by_name("build my program")
    by_alias = manager.run_command_by_name("build-my-program")

    assert by_name.success
    assert by_alias.success
    assert "built" in by_alias.output


def test_name_match_wins_over_alias(manager):
    first = manager.create_command("deploy-prod", ["echo first"], alias="first")
    manager.create_command("second", ["echo second"], alias="deploy-prod")

    assert manager.storage.get_command_by_name("deploy-prod").id == first.id


def test_find_command_by_id_name_or_alias(manager):
    command = manager.create_command("Build My Program", ["echo"])

    assert manager.find_command(command.id).id == command.id
    assert manager.find_command("BUILD MY PROGRAM").id == command.id
    assert manager.find_command("build-my-program").id == command.id
    assert manager.find_command("nothing") is None


@posix_only
def test_successful_run_increments_usage(manager):
    command = manager.create_command("task", ["true"])

    manager.run_command_by_id(command.id)
    manager.run(command.alias)

    assert manager.get_command_by_id(command.id).usage_count == 2


@posix_only
def test_failed_run_does_not_increment_usage(manager):
    command = manager.create_command("task", ["true", "false"])

    result = manager.run_command_by_id(command.id)

    assert not result.success
    assert result.failed_step == 1
    assert manager.get_command_by_id(command.id).usage_count == 0


@posix_only
def test_usage_tracking_can_be_disabled(storage):
    manager = CommandManager(storage, CommandExecutor(), track_usage=False)
    command = manager.create_command("task", ["true"])

    assert manager.run_command_by_id(command.id).success
    assert manager.get_command_by_id(command.id).usage_count == 0


@posix_only
def test_run_passes_cwd_and_callback(manager, tmp_path):
    command = manager.create_command("where", ["pwd", "echo done"])
    workdir = tmp_path / "work"
    workdir.mkdir()
    seen = []

    result = manager.run_command_by_id(command.id, str(workdir), lambda i, out: seen.append(i))

    assert result.success
    assert seen == [0, 1]
    assert "work" in result.outcomes[0].output


@posix_only
def test_run_steps_does_not_touch_store(manager, storage):
    before = storage.config_file.read_bytes()

    result = manager.run_steps(["echo adhoc"])

    assert result.success
    assert storage.config_file.read_bytes() == before


def test_crud_errors_propagate(manager):
    manager.create_command("task", ["echo"])
    with pytest.raises(DuplicateNameError):
        manager.create_command("TASK", ["echo"], alias="other")
    with pytest.raises(ReservedAliasError):
        manager.create_command("ls", ["echo"])


def test_rename_and_replace_steps(manager):
    command = manager.create_command("old", ["echo 1"])

    manager.rename_command(command.id, "new")
    manager.replace_steps(command.id, ["echo 2"])

    updated = manager.get_command_by_id(command.id)
    assert updated.name == "new"
    assert updated.alias == "old"
    assert updated.steps == ["echo 2"]


def test_delete_and_clear(manager):
    first = manager.create_command("one", ["echo"])
    manager.create_command("two", ["echo"])

    assert manager.delete_command(first.id)
    assert not manager.delete_command(first.id)
    assert [cmd.name for cmd in manager.list_commands()] == ["two"]

    manager.clear()
    assert manager.list_commands() == []


def test_check_alias_sees_saved_aliases(manager):
    manager.create_command("deploy", ["echo"])

    assert manager.check_alias("deploy").error_type == ErrorType.DUPLICATE_ALIAS
    assert manager.check_alias("fresh").valid
    assert manager.preview_alias("Fresh Name") == "fresh-name"


def test_sort_for_completion_by_usage_then_alias():
    commands = [make_command("beta", 1), make_command("alpha", 1), make_command("zulu", 5)]
    assert [cmd.alias for cmd in sort_for_completion(commands)] == ["zulu", "alpha", "beta"]


def test_completion_candidates(manager):
    manager.create_command("beta", ["echo"])
    busy = manager.create_command("alpha", ["echo"])
    manager.create_command("gamma", ["echo"])
    manager.increment_usage(busy.id)

    assert manager.completion_candidates() == ["alpha", "beta", "gamma"]


def test_from_config_uses_config_values(tmp_path):
    from one_line.config import ConfigManager

    config = ConfigManager(tmp_path)
    config.update_execution(shell="/bin/bash", step_timeout=30)
    config.config.track_usage = False

    manager = CommandManager.from_config(config)

    assert manager.executor.shell == "/bin/bash"
    assert manager.storage.config_file == tmp_path / "commands.json"
