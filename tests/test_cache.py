"""Tests for the manifest cache, raw info store, and credential caches."""

import asyncio
import json
from pathlib import Path

from enginetags.cache.store import ManifestCache, RawInfoStore, normalize_paths
from enginetags.cdn.auth import NO_KEY, CredentialCache, token_host
from enginetags.cdn.models import KeyResult
from tests.conftest import FakeSession, make_server


class TestManifestCache:
    def test_fetch_once_then_reuse(self, tmp_path: Path):
        cache = ManifestCache(tmp_path / "manifests")
        calls = []

        async def fetch():
            calls.append(1)
            return ["Data\\level0.unity3d", "readme.txt"]

        async def main():
            first = await cache.get(101, 5555, fetch)
            second = await cache.get(101, 5555, fetch)
            return first, second

        first, second = asyncio.run(main())
        assert len(calls) == 1
        assert first == second == ["Data/level0.unity3d", "readme.txt"]
        assert cache.hits == 1
        assert cache.misses == 1

    def test_persisted_as_json_list(self, tmp_path: Path):
        cache = ManifestCache(tmp_path)

        async def fetch():
            return ["b.txt", "a.txt"]

        asyncio.run(cache.get(7, 1, fetch))
        assert json.loads((tmp_path / "7.json").read_text()) == ["b.txt", "a.txt"]

    def test_survives_new_instance(self, tmp_path: Path):
        ManifestCache(tmp_path).store(9, ["x.pak"])

        async def fetch():
            raise AssertionError("should not fetch")

        assert asyncio.run(ManifestCache(tmp_path).get(9, 1, fetch)) == ["x.pak"]

    def test_keyed_by_depot_only(self, tmp_path: Path):
        cache = ManifestCache(tmp_path)
        cache.store(3, ["old.txt"])

        async def fetch():
            return ["new.txt"]

        # a newer manifest id for the same depot still returns the cached list
        assert asyncio.run(cache.get(3, 999, fetch)) == ["old.txt"]

    def test_fetch_error_not_cached(self, tmp_path: Path):
        cache = ManifestCache(tmp_path)

        async def failing():
            raise RuntimeError("network down")

        async def main():
            try:
                await cache.get(4, 1, failing)
            except RuntimeError:
                pass
            return cache.load(4)

        assert asyncio.run(main()) is None

    def test_corrupt_entry_refetched(self, tmp_path: Path):
        (tmp_path / "4.json").write_text('["a.unity3d", "b', encoding="utf-8")
        cache = ManifestCache(tmp_path)

        async def fetch():
            return ["a.unity3d"]

        assert asyncio.run(cache.get(4, 1, fetch)) == ["a.unity3d"]
        assert cache.misses == 1
        assert json.loads((tmp_path / "4.json").read_text()) == ["a.unity3d"]

    def test_non_list_entry_is_a_miss(self, tmp_path: Path):
        (tmp_path / "5.json").write_text('{"files": []}', encoding="utf-8")
        assert ManifestCache(tmp_path).load(5) is None

    def test_store_leaves_no_temp_file(self, tmp_path: Path):
        ManifestCache(tmp_path).store(6, ["x.pak"])
        assert sorted(p.name for p in tmp_path.iterdir()) == ["6.json"]

    def test_normalize_paths(self):
        assert normalize_paths(["a\\b\\c.dll", "d/e"]) == ["a/b/c.dll", "d/e"]


class TestRawInfoStore:
    def test_dump(self, tmp_path: Path):
        path = RawInfoStore(tmp_path / "info").dump(440, {"common": {"name": "Team Fortress 2"}})
        assert path == tmp_path / "info" / "440.json"
        assert json.loads(path.read_text())["common"]["name"] == "Team Fortress 2"


class TestTokenHost:
    def test_steampipe_collapsed(self):
        assert token_host("cache1-fra.steampipe.steamcontent.com") == "steampipe.steamcontent.com"

    def test_steamcontent_collapsed(self):
        assert token_host("cache5-iad.steamcontent.com") == "steamcontent.com"

    def test_other_hosts_unchanged(self):
        assert token_host("lancache.local") == "lancache.local"


class TestCredentialCache:
    def test_depot_key_looked_up_once(self):
        session = FakeSession()
        creds = CredentialCache(session)

        async def main():
            a = await creds.depot_key(10, 11)
            b = await creds.depot_key(10, 11)
            return a, b

        a, b = asyncio.run(main())
        assert a == b == b"key-11"
        assert session.key_requests == [11]

    def test_failed_lookup_cached_as_no_key(self):
        session = FakeSession()
        session.keys[12] = (KeyResult.ACCESS_DENIED, b"")
        creds = CredentialCache(session)
        assert not creds.has_depot_key(12)

        async def main():
            return [await creds.depot_key(10, 12) for _ in range(3)]

        assert asyncio.run(main()) == [NO_KEY] * 3
        assert creds.has_depot_key(12)
        assert session.key_requests == [12]

    def test_tokens_cached_per_depot_and_host(self):
        session = FakeSession()
        creds = CredentialCache(session)
        a = make_server("cache1.steamcontent.com")
        b = make_server("cache2.steamcontent.com")
        c = make_server("lancache.local")

        async def main():
            return [
                await creds.cdn_token(1, 100, a),
                await creds.cdn_token(1, 100, b),
                await creds.cdn_token(1, 100, c),
                await creds.cdn_token(1, 200, a),
            ]

        tokens = asyncio.run(main())
        assert tokens[0] == tokens[1] == "token-100-steamcontent.com"
        assert session.token_requests == [
            (100, "steamcontent.com"),
            (100, "lancache.local"),
            (200, "steamcontent.com"),
        ]
