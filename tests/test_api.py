"""
HTTP API tests
"""

import pytest
from fastapi.testclient import TestClient

import rangescan.api.main as api
from rangescan.api.main import ScanJob, app
from rangescan.config import ScanConfiguration


@pytest.fixture
def client():
    return TestClient(app)


def test_healthz(client):
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_scan_lifecycle(client, listener, closed_port):
    r = client.post(
        "/scans",
        json={
            "start": "127.0.0.1",
            "end": "127.0.0.1",
            "ports": [closed_port, listener],
            "include_defaults": False,
            "workers": 2,
            "timeout_ms": 1000,
        },
    )
    assert r.status_code == 200
    scan_id = r.json()["scan_id"]

    # TestClient runs background tasks before returning
    r = client.get(f"/scans/{scan_id}")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "done"
    assert body["error"] is None
    assert body["results"] == [{"ip": "127.0.0.1", "port": listener}]
    assert body["summary"]["count"] == 1


def test_mixed_range_is_rejected(client):
    r = client.post("/scans", json={"start": "10.0.0.1", "end": "::1"})
    assert r.status_code == 422
    assert "Mixed" in r.json()["detail"]


def test_zero_workers_is_rejected(client):
    r = client.post("/scans", json={"start": "10.0.0.1", "end": "10.0.0.2", "workers": 0})
    assert r.status_code == 422


def test_unknown_scan(client):
    assert client.get("/scans/does-not-exist").status_code == 404


def _post_local(client, port):
    return client.post(
        "/scans",
        json={"start": "127.0.0.1", "end": "127.0.0.1", "ports": [port], "include_defaults": False, "workers": 1},
    )


def test_finished_scans_are_evicted_oldest_first(client, monkeypatch, closed_port):
    monkeypatch.setattr(api, "jobs", {})
    monkeypatch.setattr(api.cfg.runtime, "api_max_jobs", 2)

    ids = [_post_local(client, closed_port).json()["scan_id"] for _ in range(3)]

    assert client.get(f"/scans/{ids[0]}").status_code == 404
    assert client.get(f"/scans/{ids[1]}").json()["status"] == "done"
    assert client.get(f"/scans/{ids[2]}").json()["status"] == "done"
    assert len(api.jobs) == 2


def test_running_scans_are_never_evicted(client, monkeypatch, closed_port):
    monkeypatch.setattr(api, "jobs", {})
    monkeypatch.setattr(api.cfg.runtime, "api_max_jobs", 1)
    running = ScanJob(scan_id="busy", config=ScanConfiguration.build("10.0.0.1", "10.0.0.1"))
    api.jobs["busy"] = running

    r = _post_local(client, closed_port)
    assert r.status_code == 429
    assert list(api.jobs) == ["busy"]
