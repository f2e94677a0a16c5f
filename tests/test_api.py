import httpx

from conftest import listing_payload


def test_health(mock_client):
    response = mock_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert "x-request-id" in response.headers


def test_mock_second_page(mock_client, upstream):
    response = mock_client.get("/api/connections?page=2&itemsPerPage=10")

    assert response.status_code == 200
    body = response.json()
    assert body["pageCount"] == 5
    assert body["itemCount"] == 47
    assert [item["id"] for item in body["items"]] == [
        f"conn_{n:03d}" for n in range(11, 21)
    ]
    assert body["items"][0]["remoteAddr"] == "192.168.0.10:50010"
    assert upstream.requests == []


def test_mock_defaults_return_everything(mock_client):
    body = mock_client.get("/api/connections").json()
    assert body["pageCount"] == 1
    assert body["itemCount"] == 47
    assert len(body["items"]) == 47


def test_mock_invalid_query_values_fall_back(mock_client):
    response = mock_client.get("/api/connections?page=abc&itemsPerPage=-4")
    assert response.status_code == 200
    assert len(response.json()["items"]) == 47


def test_non_get_is_rejected(mock_client):
    response = mock_client.post("/api/connections")
    assert response.status_code == 405
    assert response.json()["error"] == "method_not_allowed"


def test_unknown_route(mock_client):
    response = mock_client.get("/api/nope")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


def test_live_translates_page_index(live_client, upstream):
    upstream.respond(200, json=listing_payload(page_count=9, item_count=88))

    response = live_client.get("/api/connections?page=3&itemsPerPage=10")

    assert response.status_code == 200
    assert response.json()["pageCount"] == 9
    assert response.json()["itemCount"] == 88
    assert response.json()["items"][0]["session"] is None
    assert upstream.last_request.url.params["page"] == "2"
    assert upstream.last_request.url.params["itemsPerPage"] == "10"


def test_live_defaults(live_client, upstream):
    live_client.get("/api/connections?page=0")
    assert upstream.last_request.url.params["page"] == "0"
    assert upstream.last_request.url.params["itemsPerPage"] == "100"


def test_live_unreachable(live_client, upstream):
    upstream.fail(httpx.ConnectError)

    response = live_client.get("/api/connections")

    assert response.status_code == 502
    body = response.json()
    assert body["error"] == "upstream_unreachable"
    assert "MOCK_MODE" in body["hint"]


def test_live_html_page(live_client, upstream):
    upstream.respond(200, content=b"<!DOCTYPE html><p>login</p>")

    response = live_client.get("/api/connections")
    assert response.status_code == 401
    assert response.json()["error"] == "upstream_auth_failed"
    assert live_client.app.state.sessions.builds == 1

    upstream.respond(200, json=listing_payload())
    assert live_client.get("/api/connections").status_code == 200
    assert live_client.app.state.sessions.builds == 2


def test_live_mirrors_upstream_status(live_client, upstream):
    upstream.respond(404, json={"error": "path not found"})

    response = live_client.get("/api/connections")
    assert response.status_code == 404
    body = response.json()
    assert body["error"] == "upstream_status"
    assert "path not found" in body["message"]


def test_live_malformed(live_client, upstream):
    upstream.respond(200, json={"unexpected": True})

    response = live_client.get("/api/connections")
    assert response.status_code == 500
    assert response.json()["error"] == "malformed_response"


def test_debug_report(live_client, upstream):
    def responder(request):
        if "webrtcsessions" in request.url.path:
            return httpx.Response(401, json={"error": "unauthorized"})
        if "rtspsessions" in request.url.path:
            return httpx.Response(200, content=b"<html></html>", headers={"content-type": "text/html"})
        return httpx.Response(200, json=listing_payload())

    upstream.route(responder)

    response = live_client.get("/api/debug")
    assert response.status_code == 200
    body = response.json()
    assert body["config"] == {
        "BASE_URL": "http://mediamtx.test:9997/",
        "AUTH_USER": "admin",
        "MOCK_MODE": "",
    }
    assert "s3cret" not in response.text

    connections, webrtc, rtsp = body["probes"]
    assert connections["success"] is True
    assert connections["isJSON"] is True
    assert connections["contentType"] == "application/json"
    assert webrtc["status"] == 401
    assert webrtc["warning"] == "authentication failed"
    assert rtsp["isJSON"] is False
    assert rtsp["bodyPreview"] == "<html></html>"
    assert rtsp["bodyLength"] == 13


def test_startup_probe_failure_is_not_fatal(upstream):
    from fastapi.testclient import TestClient

    from conftest import make_settings
    from mtx_gateway.main import create_app

    upstream.fail(httpx.ConnectError)
    app = create_app(make_settings(), transport=upstream.transport)
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
    assert len(upstream.requests) == 1


def test_live_bodyless_upstream_status(live_client, upstream):
    upstream.respond(204)

    response = live_client.get("/api/connections")
    assert response.status_code == 502
    assert response.json()["error"] == "upstream_status"
