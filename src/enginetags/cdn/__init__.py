"""Content network layer — server pool, credentials, collaborator interfaces."""

from enginetags.cdn.auth import NO_KEY, CredentialCache, token_host
from enginetags.cdn.models import DepotRecord, KeyResult, PackageRecord, Server
from enginetags.cdn.pool import ServerPool
from enginetags.cdn.protocols import (
    CDNError,
    ManifestFetchError,
    ManifestFetcher,
    NoServerAvailableError,
    PoolError,
    RateLimitedError,
    ServerDirectory,
    ServerUnavailableError,
    Session,
    SessionError,
)

__all__ = [
    "CDNError",
    "CredentialCache",
    "DepotRecord",
    "KeyResult",
    "ManifestFetchError",
    "ManifestFetcher",
    "NO_KEY",
    "NoServerAvailableError",
    "PackageRecord",
    "PoolError",
    "RateLimitedError",
    "Server",
    "ServerDirectory",
    "ServerPool",
    "ServerUnavailableError",
    "Session",
    "SessionError",
    "token_host",
]
