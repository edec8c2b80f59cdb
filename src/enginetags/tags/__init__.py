"""Tag models and aggregation."""

from enginetags.tags.aggregator import DetectedMap
from enginetags.tags.models import RunStats, TagInfo

__all__ = ["DetectedMap", "RunStats", "TagInfo"]
