"""Collaborator interfaces and the CDN error hierarchy.

The session, server directory, manifest fetcher, and catalog live outside
this package; only the calls the pipeline makes are described here.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Protocol, Tuple

from enginetags.cdn.models import KeyResult, PackageRecord, Server


class CDNError(Exception):
    """Base for failures fetching from the content network."""


class ServerUnavailableError(CDNError):
    """A specific server is temporarily unavailable; try the next one."""

    def __init__(self, server: Server, reason: str = "") -> None:
        self.server = server
        super().__init__(f"{server.address} unavailable{': ' + reason if reason else ''}")


class NoServerAvailableError(CDNError):
    """Every candidate server for a package failed or none were eligible."""


class ManifestFetchError(CDNError):
    """A non-transient failure fetching a manifest."""


class RateLimitedError(Exception):
    """The server directory is throttling requests."""


class PoolError(Exception):
    """The server pool's refresh loop has died."""


class SessionError(Exception):
    """Login rejected or the connection could not be (re)established."""


class Session(Protocol):
    is_connected: bool
    cell_id: int
    configuration: Any

    def connect(self) -> None: ...

    def disconnect(self) -> None: ...

    async def get_depot_decryption_key(
        self, depot_id: int, package_id: int
    ) -> Tuple[KeyResult, bytes]: ...

    async def get_cdn_auth_token(self, package_id: int, depot_id: int, host: str) -> str: ...

    async def get_manifest_request_code(
        self, package_id: int, depot_id: int, manifest_id: int
    ) -> int: ...


class ServerDirectory(Protocol):
    async def load_servers(self, configuration: Any, cell_id: int) -> List[Server]: ...


class ManifestFetcher(Protocol):
    async def download_manifest(
        self,
        depot_id: int,
        manifest_id: int,
        server: Server,
        *,
        auth_token: str,
        request_code: int,
        depot_key: bytes,
    ) -> List[str]: ...


Catalog = Iterable[PackageRecord]
