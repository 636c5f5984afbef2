"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Any, Callable, Optional

import pytest

from smart_pub.cache import TTLCache
from smart_pub.config import Settings
from smart_pub.models import PackageDetails
from smart_pub.registry.pub import PubClient
from smart_pub.storage import StateStore
from smart_pub.tooling import PubGetResult

SAMPLE_PUBSPEC = """\
name: sample_app
description: A sample Flutter application.
version: 1.0.0+1

environment:
  sdk: '>=3.0.0 <4.0.0'

dependencies:
  flutter:
    sdk: flutter
  http: ^1.1.0
  provider: ^6.0.5
  local_pkg:
    path: ../local_pkg

dev_dependencies:
  flutter_test:
    sdk: flutter
  mockito: ^5.4.0
"""


class FakeClock:
    """Manually advanced clock returning epoch seconds."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRunner:
    """Stands in for PubGetRunner and records the directories it ran in."""

    def __init__(self, success: bool = True, output: str = "Got dependencies!") -> None:
        self.result = PubGetResult(success, output)
        self.calls: list[Path] = []

    async def run(self, project_dir: Path) -> PubGetResult:
        self.calls.append(Path(project_dir))
        return self.result


@pytest.fixture
def sample_pubspec() -> str:
    """Return the text of a typical Flutter manifest."""
    return SAMPLE_PUBSPEC


@pytest.fixture
def project_dir(tmp_path: Path, sample_pubspec: str) -> Path:
    """Create a project directory holding the sample manifest."""
    project = tmp_path / "sample_app"
    project.mkdir()
    (project / "pubspec.yaml").write_text(sample_pubspec, encoding="utf-8")
    return project


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def store(tmp_path: Path) -> StateStore:
    """Create a StateStore with temporary storage."""
    return StateStore(db_path=tmp_path / "state.db")


@pytest.fixture
def cache(store: StateStore, settings: Settings, clock: FakeClock) -> TTLCache:
    return TTLCache(store, settings, clock=clock)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def details_payload() -> Callable[..., dict[str, Any]]:
    """Return a factory for raw ``/api/packages/{name}`` payloads."""

    def make(
        name: str,
        version: str,
        description: Optional[str] = None,
        environment: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        return {
            "name": name,
            "latest": {
                "version": version,
                "pubspec": {
                    "name": name,
                    "description": description or f"The {name} package.",
                    "homepage": f"https://example.dev/{name}",
                    "repository": f"https://github.com/example/{name}",
                    "environment": environment or {"sdk": ">=3.0.0 <4.0.0"},
                },
            },
        }

    return make


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    """Return a factory for runners with a chosen outcome."""
    return FakeRunner


class StubPubClient(PubClient):
    """PubClient answering detail lookups from a fixed table of versions."""

    def __init__(self, cache: TTLCache, latest: dict[str, str]) -> None:
        super().__init__(cache)
        self.latest = latest
        self.lookups: list[str] = []

    async def get_package_details(self, name: str) -> Optional[PackageDetails]:
        self.lookups.append(name)
        if name not in self.latest:
            return None
        return PackageDetails(
            name=name,
            latest_version=self.latest[name],
            description=f"The {name} package.",
        )


@pytest.fixture
def stub_client(cache: TTLCache) -> StubPubClient:
    """Return a registry client that knows the sample manifest's packages."""
    return StubPubClient(
        cache,
        {"http": "1.2.0", "provider": "6.0.5", "mockito": "5.4.4"},
    )
