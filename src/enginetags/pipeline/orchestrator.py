"""Classification orchestrator — catalog in, detected map out.

Per package: pick each applicable depot's public manifest, get its file
list from the cache or from the content network, run the rules, and
credit the package under every detector that fired.

Failure policy: a ServerUnavailableError moves on to the next candidate
server. Any other CDNError stops the current package (its remaining depots
are not processed) and the run continues with the next package. Anything
else propagates and ends the run.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from loguru import logger

from enginetags.cache.store import ManifestCache, RawInfoStore
from enginetags.cdn.auth import CredentialCache
from enginetags.cdn.models import DepotRecord, PackageRecord
from enginetags.cdn.pool import ServerPool
from enginetags.cdn.protocols import (
    CDNError,
    ManifestFetcher,
    NoServerAvailableError,
    ServerUnavailableError,
    Session,
)
from enginetags.rules.registry import RuleSet
from enginetags.scanner.engine import run
from enginetags.tags.aggregator import DetectedMap
from enginetags.tags.models import RunStats, TagInfo


class Orchestrator:
    def __init__(
        self,
        session: Session,
        pool: ServerPool,
        fetcher: ManifestFetcher,
        ruleset: RuleSet,
        manifests: ManifestCache,
        *,
        credentials: Optional[CredentialCache] = None,
        raw_info: Optional[RawInfoStore] = None,
        platform: str = "windows",
    ) -> None:
        self.session = session
        self.pool = pool
        self.fetcher = fetcher
        self.ruleset = ruleset
        self.manifests = manifests
        self.credentials = credentials or CredentialCache(session)
        self.raw_info = raw_info
        self.platform = platform

        self.detected = DetectedMap()
        self.stats = RunStats()

    async def run(self, catalog: Iterable[PackageRecord]) -> DetectedMap:
        for package in catalog:
            await self.process_package(package)
        logger.info(
            "Processed {} packages, {} depots scanned, {} failed",
            self.stats.packages,
            self.stats.depots_scanned,
            len(self.stats.failed_packages),
        )
        return self.detected

    async def process_package(self, package: PackageRecord) -> bool:
        """Classify every applicable depot. Returns False if the package was aborted."""
        self.stats.packages += 1
        if self.raw_info is not None and package.raw:
            self.raw_info.dump(package.package_id, package.raw)

        tag = TagInfo(package.package_id, package.name)
        try:
            for depot in package.depots:
                if not depot.applies_to(self.platform):
                    self.stats.depots_skipped += 1
                    continue
                files = await self.acquire_manifest(package, depot)
                detected = run(files, self.ruleset)
                self.stats.depots_scanned += 1
                self.detected.merge(detected, tag)
                if detected:
                    logger.debug("{} depot {}: {}", package.name, depot.depot_id, ", ".join(sorted(detected)))
        except CDNError as exc:
            self.stats.failed_packages.append(package.package_id)
            logger.error("Aborting package {} ({}): {}", package.package_id, package.name, exc)
            return False
        return True

    async def acquire_manifest(self, package: PackageRecord, depot: DepotRecord) -> List[str]:
        assert depot.manifest_id is not None
        hits_before = self.manifests.hits

        async def fetch() -> List[str]:
            return await self.fetch_manifest(package, depot)

        files = await self.manifests.get(depot.depot_id, depot.manifest_id, fetch)
        if self.manifests.hits > hits_before:
            self.stats.cache_hits += 1
        return files

    async def fetch_manifest(self, package: PackageRecord, depot: DepotRecord) -> List[str]:
        """Download a manifest, failing over across the pool's candidates."""
        assert depot.manifest_id is not None
        package_id, depot_id = package.package_id, depot.depot_id

        depot_key = await self.credentials.depot_key(package_id, depot_id)
        request_code = await self.session.get_manifest_request_code(
            package_id, depot_id, depot.manifest_id
        )

        candidates = self.pool.select_for_package(package_id)
        if not candidates:
            raise NoServerAvailableError(f"no content servers available for package {package_id}")

        for server in candidates:
            token = await self.credentials.cdn_token(package_id, depot_id, server)
            try:
                return await self.fetcher.download_manifest(
                    depot_id,
                    depot.manifest_id,
                    server,
                    auth_token=token,
                    request_code=request_code,
                    depot_key=depot_key,
                )
            except ServerUnavailableError as exc:
                logger.warning("Depot {}: {}, trying next server", depot_id, exc)

        raise NoServerAvailableError(
            f"all {len(candidates)} servers failed for depot {depot_id} manifest {depot.manifest_id}"
        )
