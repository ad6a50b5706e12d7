from fastapi.testclient import TestClient

from extractly.main import _split_origins, create_app
from extractly.middleware import RateLimiter


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["service"] == "extractly-backend"
    assert body["timestamp"]


def test_unknown_route(client):
    resp = client.get("/api/unknown")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Endpoint not found", "path": "/api/unknown", "method": "GET"}


def test_web_ui_is_served(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert "Extractly Records" in resp.text
    assert client.get("/web/script.js").status_code == 200


def test_rate_limit(make_client):
    client = make_client(rate_limit_max_requests=2)
    assert client.get("/health").status_code == 200
    second = client.get("/health")
    assert second.headers["RateLimit-Remaining"] == "0"
    resp = client.get("/health")
    assert resp.status_code == 429
    assert resp.json() == {
        "error": "Too many requests from this IP, please try again later.",
        "retryAfter": "15 minutes",
    }


def test_body_size_limit(make_client):
    client = make_client(max_body_size=100)
    resp = client.post(
        "/api/ingest",
        json={"url": "https://example.com", "html": "<p>" + "x" * 200 + "</p>", "instruction": "x"},
    )
    assert resp.status_code == 413
    assert resp.json() == {"error": "Request body too large"}


def test_cors_allows_extension_origin(client):
    resp = client.get("/health", headers={"Origin": "chrome-extension://abcdefgh"})
    assert resp.headers["access-control-allow-origin"] == "chrome-extension://abcdefgh"

    resp = client.get("/health", headers={"Origin": "https://evil.example.com"})
    assert "access-control-allow-origin" not in resp.headers


def test_split_origins():
    exact, regex = _split_origins(["http://localhost:3000", "chrome-extension://*"])
    assert exact == ["http://localhost:3000"]
    assert regex == r"^(chrome\-extension://.*)$"
    assert _split_origins(["http://a.test"]) == (["http://a.test"], None)


def test_rate_limiter_window_resets(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr("extractly.middleware.time.monotonic", lambda: now[0])
    limiter = RateLimiter(window_ms=1000, max_requests=1)

    assert limiter.hit("1.2.3.4")[0] is True
    assert limiter.hit("1.2.3.4")[0] is False
    assert limiter.hit("5.6.7.8")[0] is True

    now[0] += 1.5
    allowed, remaining, reset_in = limiter.hit("1.2.3.4")
    assert allowed is True
    assert remaining == 0
    assert reset_in == 1.0


def test_chunked_body_size_limit(make_client, table):
    client = make_client(max_body_size=100)
    chunks = [b'{"url": "https://example.com", "html": "', b"x" * 200, b'", "instruction": "x"}']

    resp = client.post(
        "/api/ingest",
        content=(chunk for chunk in chunks),
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 413
    assert resp.json() == {"error": "Request body too large"}
    assert table.count_records() == 0


def test_rate_limiter_drops_idle_clients(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr("extractly.middleware.time.monotonic", lambda: now[0])
    limiter = RateLimiter(window_ms=1000, max_requests=5)

    for i in range(50):
        limiter.hit(f"10.0.0.{i}")
    assert len(limiter) == 50

    now[0] += 1.5
    limiter.hit("10.0.1.1")
    assert len(limiter) == 1


def boom_client(settings, database, fake_llm, node_env):
    settings.node_env = node_env
    app = create_app(settings=settings, database=database, llm=fake_llm)

    @app.get("/boom")
    def boom():
        raise RuntimeError("disk quota exceeded")

    return TestClient(app, raise_server_exceptions=False)


def test_unexpected_error_keeps_message_in_production(settings, database, fake_llm):
    with boom_client(settings, database, fake_llm, "production") as client:
        resp = client.get("/boom")
    assert resp.status_code == 500
    assert resp.json() == {"error": "disk quota exceeded"}


def test_unexpected_error_has_details_in_development(settings, database, fake_llm):
    with boom_client(settings, database, fake_llm, "development") as client:
        body = client.get("/boom").json()
    assert body["error"] == "disk quota exceeded"
    assert "RuntimeError" in body["stack"]
    assert body["path"] == "/boom"
    assert body["method"] == "GET"
