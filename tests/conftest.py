"""Shared test fixtures — rule texts, fake session / directory / fetcher."""

from __future__ import annotations

import asyncio
import sys
import textwrap
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import pytest
from loguru import logger

from enginetags.cdn.models import DepotRecord, KeyResult, PackageRecord, Server
from enginetags.cdn.protocols import ManifestFetchError, ServerUnavailableError
from enginetags.config.schema import PoolConfig

FAST_POOL = PoolConfig(refresh_interval=0.01, rate_limit_backoff=0.05)


def make_server(
    host: str,
    load: float = 1.0,
    type: str = "CDN",
    allowed: Iterable[int] = (),
) -> Server:
    return Server(host=host, weighted_load=load, type=type, allowed_package_ids=frozenset(allowed))


def make_package(package_id: int, name: str, *depots: DepotRecord, raw: Optional[Dict[str, Any]] = None) -> PackageRecord:
    return PackageRecord(package_id=package_id, name=name, depots=tuple(depots), raw=raw or {})


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll *predicate* until true, failing the test after *timeout*."""

    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout)


class FakeSession:
    def __init__(self, connected: bool = True, cell_id: int = 7) -> None:
        self.is_connected = connected
        self.cell_id = cell_id
        self.configuration = {"universe": "public"}
        self.connect_calls = 0
        self.disconnect_calls = 0
        self.keys: Dict[int, Tuple[KeyResult, bytes]] = {}
        self.key_requests: List[int] = []
        self.token_requests: List[Tuple[int, str]] = []
        self.code_requests: List[Tuple[int, int, int]] = []

    def connect(self) -> None:
        self.connect_calls += 1

    def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.is_connected = False

    async def get_depot_decryption_key(self, depot_id: int, package_id: int) -> Tuple[KeyResult, bytes]:
        self.key_requests.append(depot_id)
        return self.keys.get(depot_id, (KeyResult.OK, f"key-{depot_id}".encode()))

    async def get_cdn_auth_token(self, package_id: int, depot_id: int, host: str) -> str:
        self.token_requests.append((depot_id, host))
        return f"token-{depot_id}-{host}"

    async def get_manifest_request_code(self, package_id: int, depot_id: int, manifest_id: int) -> int:
        self.code_requests.append((package_id, depot_id, manifest_id))
        return 4242


class FakeDirectory:
    """Replays scripted responses; an Exception entry is raised. The last entry repeats."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses) or [[]]
        self.calls: List[Tuple[Any, int]] = []
        self.call_times: List[float] = []
        self.on_call = None

    async def load_servers(self, configuration: Any, cell_id: int) -> List[Server]:
        self.calls.append((configuration, cell_id))
        self.call_times.append(asyncio.get_running_loop().time())
        index = min(len(self.calls) - 1, len(self.responses) - 1)
        response = self.responses[index]
        if self.on_call is not None:
            self.on_call(len(self.calls))
        if isinstance(response, Exception):
            raise response
        return list(response)


class FakeFetcher:
    def __init__(self, manifests: Optional[Dict[int, List[str]]] = None) -> None:
        self.manifests = manifests or {}
        self.unavailable: Set[str] = set()
        self.broken: Set[str] = set()
        self.calls: List[Tuple[int, str]] = []
        self.kwargs: List[Dict[str, Any]] = []

    async def download_manifest(
        self,
        depot_id: int,
        manifest_id: int,
        server: Server,
        *,
        auth_token: str,
        request_code: int,
        depot_key: bytes,
    ) -> List[str]:
        self.calls.append((depot_id, server.host))
        self.kwargs.append({"auth_token": auth_token, "request_code": request_code, "depot_key": depot_key})
        if server.host in self.unavailable:
            raise ServerUnavailableError(server, "503")
        if server.host in self.broken:
            raise ManifestFetchError(f"manifest {manifest_id} rejected by {server.host}")
        return list(self.manifests.get(depot_id, []))


@pytest.fixture(autouse=True)
def _reset_loguru():
    """CLI commands reconfigure loguru; restore a plain stderr sink afterwards."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture
def engine_rules() -> str:
    return textwrap.dedent("""\
        ; engine signatures
        [Engine]
        Unity = \\.unity3d$
        Unity[] = (?:^|/)UnityPlayer\\.dll$
        Unreal = \\.uasset$     ; cooked content
        Godot = \\.pck$

        [Evidence]
        Python = \\.pyd$
    """)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()
