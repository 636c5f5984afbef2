"""Construction of the smart_pub object graph.

Every component receives its collaborators through its constructor; this
module is the one place that wires them together.
"""

import contextlib
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional

from smart_pub.analyzer import PubspecAnalyzer
from smart_pub.cache import TTLCache
from smart_pub.config import Settings
from smart_pub.conflicts import ConflictAdvisor
from smart_pub.manifest.accessor import ManifestAccessor
from smart_pub.notifications import Notifier
from smart_pub.registry.pub import DEFAULT_BASE_URL, PubClient
from smart_pub.storage import StateStore
from smart_pub.tooling import PubGetRunner
from smart_pub.workspace import WorkspaceService


@dataclass
class Services:
    settings: Settings
    notifier: Notifier
    store: StateStore
    cache: TTLCache
    client: PubClient
    workspace: WorkspaceService
    accessor: ManifestAccessor
    advisor: ConflictAdvisor
    analyzer: PubspecAnalyzer


@contextlib.asynccontextmanager
async def open_services(
    settings: Optional[Settings] = None,
    state_path: Optional[Path] = None,
    notifier: Optional[Notifier] = None,
    runner: Optional[PubGetRunner] = None,
    base_url: str = DEFAULT_BASE_URL,
    run_pub_get: bool = True,
) -> AsyncIterator[Services]:
    """Build all services and close the HTTP session on exit.

    Args:
        settings: Settings to use. Defaults to Settings().
        state_path: SQLite file for persisted state. Defaults to
            ~/.cache/smart_pub/state.db.
        notifier: Receiver of user-visible messages.
        runner: Runner for ``flutter pub get``.
        base_url: Registry API root.
        run_pub_get: Whether manifest writes trigger ``flutter pub get``.

    Yields:
        The wired Services.
    """
    settings = settings or Settings()
    notifier = notifier or Notifier()

    store = StateStore(state_path)
    cache = TTLCache(store, settings)
    client = PubClient(cache, settings, notifier, base_url=base_url)
    workspace = WorkspaceService(client, settings)
    accessor = ManifestAccessor(
        runner=runner,
        notifier=notifier,
        on_written=workspace.refresh_project,
        run_pub_get=run_pub_get,
    )
    workspace.accessor = accessor
    advisor = ConflictAdvisor(workspace, accessor, notifier)
    accessor.on_pub_get_failure = advisor.handle_pub_get_error

    async with client:
        yield Services(
            settings=settings,
            notifier=notifier,
            store=store,
            cache=cache,
            client=client,
            workspace=workspace,
            accessor=accessor,
            advisor=advisor,
            analyzer=PubspecAnalyzer(client),
        )
