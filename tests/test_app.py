import logging

ALLOWED = "http://localhost:3000"
BLOCKED = "https://evil.example"


async def test_health(client):
    res = await client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "OK"
    assert body["environment"] == "test"
    assert body["uptime"] >= 0
    assert body["timestamp"]


async def test_unknown_route_is_json_404(client):
    res = await client.get("/api/nothing-here")
    assert res.status_code == 404
    body = res.json()
    assert body["message"] == "Route not found"
    assert body["status_code"] == 404


async def test_json_responses_get_security_headers_but_no_csp(client):
    res = await client.get("/health")
    assert res.headers["x-content-type-options"] == "nosniff"
    assert "content-security-policy" not in res.headers


async def test_allowed_origin_gets_credentialed_cors(client):
    res = await client.get("/health", headers={"Origin": ALLOWED})
    assert res.headers["access-control-allow-origin"] == ALLOWED
    assert res.headers["access-control-allow-credentials"] == "true"


async def test_blocked_origin_is_logged_and_gets_no_cors(client, caplog):
    with caplog.at_level(logging.WARNING):
        res = await client.get("/health", headers={"Origin": BLOCKED})
    assert res.status_code == 200
    assert "access-control-allow-origin" not in res.headers
    assert "CORS blocked origin" in caplog.text


async def test_request_without_origin_passes(client):
    res = await client.get("/api/banners/public")
    assert res.status_code == 200
    assert "access-control-allow-origin" not in res.headers


async def test_preflight(client):
    res = await client.options(
        "/api/banners",
        headers={
            "Origin": ALLOWED,
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Authorization, Content-Type",
        },
    )
    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == ALLOWED
    assert "POST" in res.headers["access-control-allow-methods"]

    res = await client.options(
        "/api/banners",
        headers={"Origin": BLOCKED, "Access-Control-Request-Method": "POST"},
    )
    assert res.status_code == 400


async def test_admin_page_redirects_browser_to_login(client):
    res = await client.get("/admin/banners", headers={"Accept": "text/html"})
    assert res.status_code == 303
    assert res.headers["location"] == "/admin/login?auth=expired"


async def test_admin_page_answers_api_callers_with_json(client):
    res = await client.get("/admin/banners", headers={"Accept": "application/json"})
    assert res.status_code == 401
    assert res.json()["message"].startswith("Your session has timed out")


async def test_login_page_sets_csp_and_xsrf_cookie(client):
    res = await client.get("/admin/login?auth=expired")
    assert res.status_code == 200
    assert "script-src 'self' 'nonce-" in res.headers["content-security-policy"]
    assert "XSRF-TOKEN" in res.cookies
    assert "Your session has expired" in res.text
