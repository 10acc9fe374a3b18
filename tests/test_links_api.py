from datetime import datetime, timedelta

from shortlinks.config import settings
from shortlinks.services.links import format_short_url


def test_create_anonymous_link(client):
    resp = client.post("/api/urls/shorten", json={"original_url": "https://example.com/some/long/path"})

    assert resp.status_code == 201
    body = resp.json()
    assert len(body["short_code"]) == 7
    assert body["short_url"] == f"http://localhost:8000/{body['short_code']}"
    assert body["custom_slug"] is None
    assert body["click_count"] == 0
    created = datetime.fromisoformat(body["created_at"])
    expires = datetime.fromisoformat(body["expires_at"])
    assert expires - created == timedelta(days=365)


def test_create_with_custom_slug(client, alice):
    resp = client.post(
        "/api/urls/shorten",
        json={"original_url": "https://example.com", "custom_slug": "promo"},
        headers=alice["headers"],
    )

    assert resp.status_code == 201
    assert resp.json()["short_code"] == "promo"
    assert resp.json()["custom_slug"] == "promo"


def test_custom_slug_taken_returns_409(client):
    first = client.post("/api/urls/shorten", json={"original_url": "https://example.com", "custom_slug": "promo"})
    assert first.status_code == 201

    second = client.post("/api/urls/shorten", json={"original_url": "https://example.org", "custom_slug": "promo"})
    assert second.status_code == 409
    assert "taken" in second.json()["detail"]


def test_invalid_slug_returns_400(client):
    for slug in ["ab", "bad space", "nope!", "x" * 51]:
        resp = client.post("/api/urls/shorten", json={"original_url": "https://example.com", "custom_slug": slug})
        assert resp.status_code == 400, slug


def test_invalid_url_returns_400(client):
    for url in ["ftp://example.com", "not a url", "example.com"]:
        resp = client.post("/api/urls/shorten", json={"original_url": url})
        assert resp.status_code == 400, url


def test_missing_url_returns_422(client):
    resp = client.post("/api/urls/shorten", json={})
    assert resp.status_code == 422


def test_invalid_token_on_shorten_creates_anonymous_link(client, alice):
    resp = client.post(
        "/api/urls/shorten",
        json={"original_url": "https://example.com"},
        headers={"Authorization": "Bearer not-a-token"},
    )
    assert resp.status_code == 201

    mine = client.get("/api/urls/my", headers=alice["headers"]).json()
    assert mine["total"] == 0


def test_list_requires_auth(client):
    assert client.get("/api/urls/my").status_code == 401


def test_list_pagination(client, alice):
    for i in range(25):
        resp = client.post(
            "/api/urls/shorten",
            json={"original_url": f"https://example.com/{i}"},
            headers=alice["headers"],
        )
        assert resp.status_code == 201

    resp = client.get("/api/urls/my", params={"page": 2, "limit": 10}, headers=alice["headers"])

    assert resp.status_code == 200
    body = resp.json()
    assert len(body["items"]) == 10
    assert body["page"] == 2
    assert body["limit"] == 10
    assert body["total"] == 25
    assert body["pages"] == 3


def test_list_newest_first_and_only_own_links(client, alice, bob):
    for i in range(3):
        client.post("/api/urls/shorten", json={"original_url": f"https://a.example/{i}"}, headers=alice["headers"])
    client.post("/api/urls/shorten", json={"original_url": "https://b.example/"}, headers=bob["headers"])

    items = client.get("/api/urls/my", headers=alice["headers"]).json()["items"]

    assert [item["original_url"] for item in items] == [f"https://a.example/{i}" for i in (2, 1, 0)]


def test_list_rejects_bad_paging(client, alice):
    assert client.get("/api/urls/my", params={"page": 0}, headers=alice["headers"]).status_code == 422
    assert client.get("/api/urls/my", params={"limit": 101}, headers=alice["headers"]).status_code == 422


def test_get_link_includes_clicks(client, alice):
    created = client.post(
        "/api/urls/shorten", json={"original_url": "https://example.com"}, headers=alice["headers"]
    ).json()
    client.get(f"/{created['short_code']}", headers={"Referer": "https://ref.example/"}, follow_redirects=False)

    resp = client.get(f"/api/urls/{created['id']}", headers=alice["headers"])

    assert resp.status_code == 200
    body = resp.json()
    assert body["click_count"] == 1
    assert len(body["clicks"]) == 1
    assert body["clicks"][0]["referrer"] == "https://ref.example/"


def test_other_users_link_is_not_found(client, alice, bob):
    created = client.post(
        "/api/urls/shorten", json={"original_url": "https://example.com"}, headers=alice["headers"]
    ).json()

    assert client.get(f"/api/urls/{created['id']}", headers=bob["headers"]).status_code == 404
    assert client.delete(f"/api/urls/{created['id']}", headers=bob["headers"]).status_code == 404
    assert client.get(f"/api/urls/{created['id']}", headers=alice["headers"]).status_code == 200


def test_delete_twice_reports_not_found(client, alice):
    created = client.post(
        "/api/urls/shorten", json={"original_url": "https://example.com"}, headers=alice["headers"]
    ).json()

    first = client.delete(f"/api/urls/{created['id']}", headers=alice["headers"])
    assert first.status_code == 200

    second = client.delete(f"/api/urls/{created['id']}", headers=alice["headers"])
    assert second.status_code == 404

    assert client.get(f"/{created['short_code']}", follow_redirects=False).status_code == 404


def test_short_url_uses_configured_domain(monkeypatch):
    monkeypatch.setattr(settings, "SHORT_DOMAIN", "https://sho.rt/")
    assert format_short_url("abc1234") == "https://sho.rt/abc1234"


def test_short_url_production_fallback(monkeypatch):
    monkeypatch.setattr(settings, "SHORT_DOMAIN", None)
    monkeypatch.setattr(settings, "ENVIRONMENT", "production")
    monkeypatch.setattr(settings, "PUBLIC_BASE_URL", "https://links.example.com")
    assert format_short_url("abc1234") == "https://links.example.com/abc1234"
