"""Unit tests for manifest dependency edits."""

import pytest
import yaml

from smart_pub.manifest.accessor import ManifestAccessor
from smart_pub.notifications import Level, Notifier


def _read(project_dir):
    return yaml.safe_load((project_dir / "pubspec.yaml").read_text())


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def accessor(runner, notifier) -> ManifestAccessor:
    return ManifestAccessor(runner=runner, notifier=notifier)


class TestAddDependency:
    """Test adding and overwriting entries."""

    @pytest.mark.parametrize("requested", ["2.0.0", "^2.0.0", "~2.0.0"])
    async def test_written_in_caret_form(self, accessor, project_dir, requested):
        assert await accessor.add_dependency(project_dir, "dio", requested) is True
        assert _read(project_dir)["dependencies"]["dio"] == "^2.0.0"

    async def test_dev_dependency(self, accessor, project_dir):
        await accessor.add_dependency(project_dir, "build_runner", "2.4.0", is_dev=True)
        assert _read(project_dir)["dev_dependencies"]["build_runner"] == "^2.4.0"

    async def test_overwrites_existing(self, accessor, project_dir):
        await accessor.add_dependency(project_dir, "http", "1.2.0")
        assert _read(project_dir)["dependencies"]["http"] == "^1.2.0"

    async def test_runs_pub_get_and_notifies(self, accessor, project_dir, runner, notifier):
        await accessor.add_dependency(project_dir, "dio", "5.4.0")

        assert runner.calls == [project_dir]
        assert notifier.of_level(Level.INFO) == [
            "Dependencies updated successfully!",
            "Added dio:^5.4.0 to dependencies",
        ]

    async def test_pub_get_disabled(self, runner, notifier, project_dir):
        accessor = ManifestAccessor(runner=runner, notifier=notifier, run_pub_get=False)
        await accessor.add_dependency(project_dir, "dio", "5.4.0")
        assert runner.calls == []

    async def test_on_written_hook(self, runner, project_dir):
        written = []

        async def on_written(path):
            written.append(path)

        accessor = ManifestAccessor(runner=runner, on_written=on_written)
        await accessor.add_dependency(project_dir, "dio", "5.4.0")

        assert written == [project_dir]

    async def test_missing_manifest(self, accessor, tmp_path, notifier, runner):
        assert await accessor.add_dependency(tmp_path, "dio", "5.4.0") is False
        assert notifier.of_level(Level.ERROR) == [f"pubspec.yaml not found in {tmp_path}"]
        assert runner.calls == []

    async def test_unparseable_manifest(self, accessor, tmp_path, notifier):
        (tmp_path / "pubspec.yaml").write_text("name: [broken")

        assert await accessor.add_dependency(tmp_path, "dio", "5.4.0") is False
        assert notifier.of_level(Level.ERROR)[0].startswith("Failed to add dependency:")

    async def test_update_dependency(self, accessor, project_dir):
        assert await accessor.update_dependency(project_dir, "provider", "6.1.2") is True
        assert _read(project_dir)["dependencies"]["provider"] == "^6.1.2"


class TestRemoveDependency:
    """Test removing entries."""

    async def test_remove(self, accessor, project_dir, notifier):
        assert await accessor.remove_dependency(project_dir, "http") is True
        assert "http" not in _read(project_dir)["dependencies"]
        assert "Removed http from dependencies" in notifier.of_level(Level.INFO)

    async def test_remove_absent_warns(self, accessor, project_dir, notifier, runner):
        before = (project_dir / "pubspec.yaml").read_text()

        assert await accessor.remove_dependency(project_dir, "mockito") is False

        assert notifier.of_level(Level.WARNING) == ["mockito not found in dependencies"]
        assert (project_dir / "pubspec.yaml").read_text() == before
        assert runner.calls == []

    async def test_remove_dev(self, accessor, project_dir):
        assert await accessor.remove_dependency(project_dir, "mockito", is_dev=True) is True
        assert "mockito" not in _read(project_dir)["dev_dependencies"]

    async def test_missing_manifest(self, accessor, tmp_path, notifier):
        assert await accessor.remove_dependency(tmp_path, "http") is False
        assert notifier.of_level(Level.ERROR) == [f"pubspec.yaml not found in {tmp_path}"]


class TestFetchPackages:
    """Test the pub get step."""

    async def test_failure_without_handler(self, notifier, project_dir, make_runner):
        accessor = ManifestAccessor(runner=make_runner(False, "boom"), notifier=notifier)

        assert await accessor.fetch_packages(project_dir) is False
        assert notifier.of_level(Level.ERROR) == ["Pub get failed: boom"]

    async def test_failure_goes_to_handler(self, notifier, project_dir, make_runner):
        failures = []

        async def on_failure(path, output):
            failures.append((path, output))

        accessor = ManifestAccessor(
            runner=make_runner(False, "version solving failed"),
            notifier=notifier,
            on_pub_get_failure=on_failure,
        )

        assert await accessor.fetch_packages(project_dir) is False
        assert failures == [(project_dir, "version solving failed")]
        assert notifier.of_level(Level.ERROR) == []

    async def test_write_still_succeeds_when_pub_get_fails(self, notifier, project_dir, make_runner):
        accessor = ManifestAccessor(runner=make_runner(False, "boom"), notifier=notifier)

        assert await accessor.add_dependency(project_dir, "dio", "5.4.0") is True
        assert _read(project_dir)["dependencies"]["dio"] == "^5.4.0"
