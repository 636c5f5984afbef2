"""Unit tests for service wiring."""

from aioresponses import aioresponses

from smart_pub.config import Settings
from smart_pub.notifications import Level, Notifier
from smart_pub.services import open_services


async def test_open_services_wiring(tmp_path, runner):
    settings = Settings(cache_expiration=60)

    async with open_services(settings, tmp_path / "state.db", runner=runner) as services:
        assert services.cache.settings is settings
        assert services.client.cache is services.cache
        assert services.workspace.accessor is services.accessor
        assert services.accessor.on_pub_get_failure == services.advisor.handle_pub_get_error
        assert services.analyzer.client is services.client
        assert services.store.db_path == tmp_path / "state.db"


async def test_write_refreshes_tracked_project(tmp_path, runner, project_dir):
    # Unmocked registry lookups fail fast and leave dependencies unannotated
    with aioresponses():
        async with open_services(state_path=tmp_path / "state.db", runner=runner) as services:
            project = await services.workspace.create_project(project_dir)
            services.workspace.projects.append(project)

            await services.accessor.remove_dependency(project_dir, "http")

            assert services.workspace.get_project(project_dir).find("http") is None
            assert runner.calls == [project_dir]


async def test_pub_get_failure_is_classified(tmp_path, make_runner, project_dir):
    notifier = Notifier()
    failing = make_runner(False, "version solving failed")

    async with open_services(
        state_path=tmp_path / "state.db", notifier=notifier, runner=failing
    ) as services:
        assert await services.accessor.add_dependency(project_dir, "dio", "5.4.0") is True

    assert notifier.of_level(Level.ERROR) == ["Dependency version conflict detected!"]
