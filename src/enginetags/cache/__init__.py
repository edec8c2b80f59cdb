"""Persisted manifests and raw metadata."""

from enginetags.cache.store import ManifestCache, RawInfoStore, normalize_paths

__all__ = ["ManifestCache", "RawInfoStore", "normalize_paths"]
