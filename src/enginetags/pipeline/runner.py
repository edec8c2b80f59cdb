"""Pipeline entry point: wire the pool, caches, and orchestrator together."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Tuple

from loguru import logger

from enginetags.cache.store import ManifestCache, RawInfoStore
from enginetags.cdn.models import PackageRecord
from enginetags.cdn.pool import ServerPool
from enginetags.cdn.protocols import ManifestFetcher, ServerDirectory, Session
from enginetags.config.schema import EngineTagsConfig
from enginetags.output import json_report
from enginetags.pipeline.orchestrator import Orchestrator
from enginetags.rules.registry import RuleSet, load_rules
from enginetags.tags.aggregator import DetectedMap
from enginetags.tags.models import RunStats


async def run_pipeline(
    session: Session,
    directory: ServerDirectory,
    fetcher: ManifestFetcher,
    catalog: Iterable[PackageRecord],
    config: EngineTagsConfig,
    *,
    ruleset: Optional[RuleSet] = None,
    root: Path = Path("."),
) -> Tuple[DetectedMap, RunStats]:
    """Classify *catalog* and write the detected map to ``config.output.path``.

    Rules are loaded before anything touches the network, so a bad rule
    file fails fast. The output file is written only after every package
    has been processed; an exception before that leaves no output.

    The returned map and stats are what
    :func:`enginetags.output.terminal.render_summary` prints.
    """
    if ruleset is None:
        ruleset = load_rules(root / config.rules.path)
    logger.info("Loaded {} detectors", len(ruleset))

    manifests = ManifestCache(root / config.cache.manifests_dir)
    raw_info = RawInfoStore(root / config.cache.raw_info_dir) if config.scan.dump_raw_info else None

    async with ServerPool(session, directory, config.pool) as pool:
        logger.info("Waiting for content servers...")
        await pool.wait_until_ready()
        orchestrator = Orchestrator(
            session,
            pool,
            fetcher,
            ruleset,
            manifests,
            raw_info=raw_info,
            platform=config.scan.platform,
        )
        detected = await orchestrator.run(catalog)

    out = json_report.write(detected, root / config.output.path)
    logger.info("Wrote {} detectors to {}", len(detected), out)
    return detected, orchestrator.stats
