"""Depot key and CDN token caches.

Both caches live for the process. A depot whose key lookup did not succeed
is stored with NO_KEY so the lookup is not repeated.
"""

from __future__ import annotations

from typing import Dict, Tuple

from loguru import logger

from enginetags.cdn.models import KeyResult, Server
from enginetags.cdn.protocols import Session

NO_KEY = b""

_STEAMPIPE_SUFFIX = ".steampipe.steamcontent.com"
_STEAMCONTENT_SUFFIX = ".steamcontent.com"


def token_host(host: str) -> str:
    """Collapse per-node CDN hostnames to the domain tokens are issued for."""
    if host.endswith(_STEAMPIPE_SUFFIX):
        return _STEAMPIPE_SUFFIX[1:]
    if host.endswith(_STEAMCONTENT_SUFFIX):
        return _STEAMCONTENT_SUFFIX[1:]
    return host


class CredentialCache:
    def __init__(self, session: Session) -> None:
        self.session = session
        self._depot_keys: Dict[int, bytes] = {}
        self._tokens: Dict[Tuple[int, str], str] = {}

    def has_depot_key(self, depot_id: int) -> bool:
        """True once *depot_id* has been looked up, whatever the outcome."""
        return depot_id in self._depot_keys

    async def depot_key(self, package_id: int, depot_id: int) -> bytes:
        """Decryption key for *depot_id*, or NO_KEY if none is available."""
        if depot_id in self._depot_keys:
            return self._depot_keys[depot_id]

        result, key = await self.session.get_depot_decryption_key(depot_id, package_id)
        if result is not KeyResult.OK:
            logger.debug("No decryption key for depot {} ({})", depot_id, result.value)
            key = NO_KEY
        self._depot_keys[depot_id] = key
        return key

    async def cdn_token(self, package_id: int, depot_id: int, server: Server) -> str:
        host = token_host(server.host)
        cache_key = (depot_id, host)
        token = self._tokens.get(cache_key)
        if token is None:
            token = await self.session.get_cdn_auth_token(package_id, depot_id, host)
            self._tokens[cache_key] = token
        return token
