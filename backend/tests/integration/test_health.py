"""Health endpoint smoke test."""

from __future__ import annotations


def test_health(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "ok"
    assert body["db"] == "ok"
    assert body["ledger"] == "sql"
