"""
tests/test_health.py -- Integration tests for the liveness endpoints.

Covers:
  - GET / returns the plain-text liveness string
  - GET /api/health reports status, version, and the active session mode
  - Unknown routes use the {"message": ...} error envelope
"""

from __future__ import annotations


def test_root_liveness(cookie_client):
    client, _, _ = cookie_client
    resp = client.get("/")
    assert resp.status_code == 200
    assert "MedAI backend running" in resp.text


def test_health_reports_cookie_mode(cookie_client):
    client, _, _ = cookie_client
    data = client.get("/api/health").json()
    assert data["status"] == "ok"
    assert data["session_mode"] == "cookie"
    assert "version" in data


def test_health_reports_token_mode(token_client):
    client, _, _ = token_client
    assert client.get("/api/health").json()["session_mode"] == "token"


def test_unknown_route_uses_message_envelope(cookie_client):
    client, _, _ = cookie_client
    resp = client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert "message" in resp.json()
