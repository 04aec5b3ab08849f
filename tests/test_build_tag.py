import httpx
import pytest

from astrolog.services.build_tag import BuildTagStore, fetch_remote_build_tag


@pytest.fixture
def store(tmp_path):
    return BuildTagStore(tmp_path / "state" / "seen_build_tag.json")


def test_first_visit_records_tag_without_reload(store):
    assert store.load() is None
    assert store.check("build-1") is False
    assert store.load() == "build-1"


def test_same_tag_does_not_reload(store):
    store.save("build-1")
    assert store.check("build-1") is False


def test_new_tag_requests_reload_once(store):
    store.save("build-1")
    assert store.check("build-2") is True
    assert store.load() == "build-2"
    assert store.check("build-2") is False


def test_corrupt_state_counts_as_unseen(store):
    store.path.parent.mkdir(parents=True)
    store.path.write_text("{not json", encoding="utf-8")
    assert store.load() is None
    assert store.check("build-3") is False
    assert store.load() == "build-3"


def test_fetch_remote_build_tag_reads_version_endpoint():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"buildTag": "abc123", "now": "2024-10-02T00:00:00Z"})

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        assert fetch_remote_build_tag("https://logbook.example.test/", client=client) == "abc123"

    assert str(seen[0].url) == "https://logbook.example.test/api/version"
    assert seen[0].headers["cache-control"] == "no-store"


def test_version_endpoint_feeds_the_store(anon_client, store, monkeypatch):
    from astrolog.core.config import settings

    monkeypatch.setattr(settings, "build_tag", "v1")
    store.check(fetch_remote_build_tag("http://testserver", client=anon_client))
    monkeypatch.setattr(settings, "build_tag", "v2")
    assert store.check(fetch_remote_build_tag("http://testserver", client=anon_client)) is True
