"""Tests for the post-install source patch task."""

import time

import pytest

from caskfetch.cache.config import CacheConfig
from caskfetch.tasks.source_patch import (
    definition_copy_patterns,
    find_definition_copy,
    find_support_path,
    patch_definition_copy,
    schedule_source_patch,
)


@pytest.fixture
def tap(tmp_path):
    """A definition that requires a support library relatively."""
    root = tmp_path / "tap"
    (root / "Casks").mkdir(parents=True)
    (root / "lib").mkdir()
    support = root / "lib" / "utils.rb"
    support.write_text("# helpers\n")
    definition = root / "Casks" / "tool.rb"
    definition.write_text('require_relative "../lib/utils"\n\ncask "tool" do\nend\n')
    return definition, support


def store_copy(prefix, relative, text):
    path = prefix / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


class TestDefinitionCopies:
    """Test locating stored definition copies."""

    def test_patterns(self):
        assert definition_copy_patterns("tool") == [
            "C*/tool/.metadata/*/.brew/tool.rb",
            "C*/tool/.metadata/*/*/Casks/tool.rb",
            "C*/tool/*/.brew/tool.rb",
            "C*/tool/*/*/Casks/tool.rb",
        ]

    def test_find_newest_copy(self, tmp_path):
        old = store_copy(tmp_path, "Caskroom/tool/.metadata/1.0/20240101/Casks/tool.rb", "old")
        time.sleep(0.05)
        new = store_copy(tmp_path, "Cellar/tool/2.0/.brew/tool.rb", "new")
        assert old.stat().st_ctime <= new.stat().st_ctime

        assert find_definition_copy(tmp_path, "tool") == new

    def test_find_nothing(self, tmp_path):
        assert find_definition_copy(tmp_path, "tool") is None

    def test_other_names_ignored(self, tmp_path):
        store_copy(tmp_path, "Caskroom/other/1.0/.brew/other.rb", "x")
        assert find_definition_copy(tmp_path, "tool") is None


class TestFindSupportPath:
    """Test discovery of the required library."""

    def test_first_require_relative(self, tap):
        definition, support = tap
        assert find_support_path(definition) == support.resolve()

    def test_no_require(self, tmp_path):
        definition = tmp_path / "tool.rb"
        definition.write_text('cask "tool" do\nend\n')
        assert find_support_path(definition) is None


class TestPatchDefinitionCopy:
    """Test rewriting the require line."""

    def test_rewrites_relative_require(self, tmp_path, tap):
        definition, support = tap
        prefix = tmp_path / "prefix"
        copy = store_copy(
            prefix, "Caskroom/tool/.metadata/1.0/20240101/Casks/tool.rb", definition.read_text()
        )

        assert patch_definition_copy(prefix, definition, support) == copy

        text = copy.read_text()
        assert f"require '{support}'" in text
        assert "require_relative" not in text
        assert 'cask "tool" do' in text

    def test_leaves_other_requires(self, tmp_path, tap):
        definition, support = tap
        prefix = tmp_path / "prefix"
        original = 'require_relative "../lib/other"\n'
        copy = store_copy(prefix, "Caskroom/tool/1.0/.brew/tool.rb", original)

        patch_definition_copy(prefix, definition, support)

        assert copy.read_text() == original

    def test_no_copy(self, tmp_path, tap):
        definition, support = tap
        assert patch_definition_copy(tmp_path / "prefix", definition, support) is None


class TestScheduleSourcePatch:
    """Test the install/reinstall trigger."""

    @pytest.mark.parametrize("command", ["install", "reinstall"])
    def test_schedules_for_install_commands(self, tmp_path, tap, scheduler, command):
        definition, support = tap
        config = CacheConfig(cache_dir=tmp_path / "c", prefix=tmp_path / "prefix")

        assert schedule_source_patch(command, definition, config=config, scheduler=scheduler)

        delay, action, args, _ = scheduler.tasks[0]
        assert delay == config.patch_delay == 8
        assert action is patch_definition_copy
        assert args == (config.prefix, definition.resolve(), support.resolve())

    @pytest.mark.parametrize("command", ["fetch", "upgrade", "uninstall", ""])
    def test_other_commands_do_not_schedule(self, tmp_path, tap, scheduler, command):
        definition, _ = tap
        config = CacheConfig(cache_dir=tmp_path / "c", prefix=tmp_path / "prefix")

        assert not schedule_source_patch(command, definition, config=config, scheduler=scheduler)
        assert scheduler.tasks == []

    def test_nothing_to_patch(self, tmp_path, scheduler):
        definition = tmp_path / "tool.rb"
        definition.write_text('cask "tool" do\nend\n')
        config = CacheConfig(cache_dir=tmp_path / "c", prefix=tmp_path / "prefix")

        assert not schedule_source_patch("install", definition, config=config, scheduler=scheduler)
        assert scheduler.tasks == []

    def test_scheduled_task_patches_copy(self, tmp_path, tap, scheduler):
        definition, support = tap
        config = CacheConfig(cache_dir=tmp_path / "c", prefix=tmp_path / "prefix")
        copy = store_copy(
            config.prefix, "Caskroom/tool/.metadata/1.0/20240101/Casks/tool.rb", definition.read_text()
        )

        schedule_source_patch("install", definition, config=config, scheduler=scheduler)
        scheduler.run_all()

        assert f"require '{support.resolve()}'" in copy.read_text()
