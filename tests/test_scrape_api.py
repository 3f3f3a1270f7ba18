import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.routers.scrape import get_pipeline
from core.models import NormalizedProfile, NormalizedTweet
from scrapers.pipeline import ScrapePipeline


@pytest.fixture
def session(fake_session_cls, tweet_raw, profile_raw):
    return fake_session_cls(tweets={"20": tweet_raw}, profiles={"jack": profile_raw})


@pytest.fixture
def client(session):
    app = create_app()
    app.dependency_overrides[get_pipeline] = lambda: ScrapePipeline(
        session_factory=lambda: session, timeout=1
    )
    return TestClient(app)


def test_root_is_alive(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "running" in resp.text


@pytest.mark.parametrize(
    "body",
    [
        {"urls": []},
        {"urls": [123]},
        {"urls": ["https://x.com/jack", None]},
        {"urls": "https://x.com/jack"},
        {},
        ["https://x.com/jack"],
    ],
)
def test_invalid_input_is_rejected(client, session, body):
    resp = client.post("/scrape", json=body)
    assert resp.status_code == 400, resp.text
    assert "error" in resp.json()
    assert session.calls == []


def test_profile_url(client):
    resp = client.post("/scrape", json={"urls": ["https://x.com/jack"]})
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert len(data) == 1
    assert data[0]["url"] == "https://x.com/jack"
    assert data[0]["category"] == "Profile"
    assert set(data[0]["content"]) == set(NormalizedProfile.model_fields)
    assert data[0]["content"]["username"] == "jack"
    assert data[0]["content"]["tweets_count"] == "N/A"
    assert "error" not in data[0]


def test_mixed_batch_keeps_input_order(client):
    urls = [
        "https://x.com/jack/status/20",
        "https://x.com/i/communities/123",
        "https://example.com/page",
        "https://x.com/nobody/status/404",
    ]
    resp = client.post("/scrape", json={"urls": urls})
    assert resp.status_code == 200, resp.text
    data = resp.json()

    assert [d["url"] for d in data] == urls
    assert [d["category"] for d in data] == ["Tweet", "Community", "Unknown", "Tweet"]
    assert set(data[0]["content"]) == set(NormalizedTweet.model_fields)
    assert data[0]["content"]["views"] == 1000
    assert isinstance(data[1]["content"], str)
    assert isinstance(data[2]["content"], str)
    assert data[3]["content"] is None
    assert data[3]["error"] == "Scraped content was unexpectedly empty."


def test_unexpected_failure_returns_500(client):
    class BrokenPipeline:
        async def run(self, urls):
            raise RuntimeError("boom")

    client.app.dependency_overrides[get_pipeline] = lambda: BrokenPipeline()
    resp = client.post("/scrape", json={"urls": ["https://x.com/jack"]})
    assert resp.status_code == 500
    assert resp.json()["details"] == "boom"
    assert "error" in resp.json()
