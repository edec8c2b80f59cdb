"""JSON serialisation of the detected map and check results."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Set

from enginetags.tags.aggregator import DetectedMap


def to_dict(detected: DetectedMap) -> Dict[str, List[Dict[str, Any]]]:
    """Convert a DetectedMap to a JSON-serialisable dict with stable ordering."""
    return {
        key: [{"id": tag.package_id, "name": tag.name} for tag in tags]
        for key, tags in detected.items()
    }


def render(detected: DetectedMap) -> str:
    return json.dumps(to_dict(detected), indent=2, ensure_ascii=False)


def write(detected: DetectedMap, path: Path) -> Path:
    """Write the final artifact in one go."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(render(detected), encoding="utf-8")
    tmp.replace(path)
    return path


def render_check(results: Dict[str, Set[str]]) -> str:
    """Render ``enginetags check`` results: file list name -> detected keys."""
    return json.dumps({name: sorted(keys) for name, keys in results.items()}, indent=2)
