"""Smoke tests for the assembled application (in-memory store from conftest)."""

from fastapi.testclient import TestClient

from app.main import app


def test_health_and_empty_listing():
    with TestClient(app) as client:
        health = client.get("/api/v1/health")
        janitor = client.get("/api/v1/health/janitor")
        streams = client.get("/api/v1/streams")

    assert health.status_code == 200
    assert health.json()["results"] == "OK"

    assert janitor.status_code == 200
    assert janitor.json()["results"]["running"] is True

    assert streams.status_code == 200
    assert streams.json()["results"] == {"streams": []}


def test_stop_unknown_stream_is_404():
    with TestClient(app) as client:
        response = client.delete("/api/v1/streams/st_missing")

    assert response.status_code == 404
    assert response.json()["errcode"] == "E_STREAM_NOT_FOUND"
