"""End-to-end tests for captcha-gated submission and admin moderation."""

import json
from pathlib import Path

from fastapi.testclient import TestClient

from algo_catalog.core.app_factory import create_app
from algo_catalog.core.container import build_container
from tests.conftest import ADMIN_AUTH, FakeClock, make_settings


def _submit(client: TestClient, payload: dict):
    return client.post("/api/submit", json=payload)


def test_captcha_endpoint_hides_answer(client: TestClient) -> None:
    body = client.get("/api/captcha").json()

    assert set(body) == {"id", "question"}
    assert body["question"].startswith("What is ")


def test_submit_approve_publish(client: TestClient, submit_payload) -> None:
    response = _submit(client, submit_payload("Foo Bar!"))

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Algorithm submitted for review"
    submission_id = body["submissionId"]
    assert client.get("/api/algorithms/foo-bar").status_code == 404

    pending = client.get("/api/admin/submissions", auth=ADMIN_AUTH).json()
    assert [s["id"] for s in pending] == [submission_id]
    assert pending[0]["status"] == "pending"
    assert pending[0]["algorithm"]["submittedBy"] == "tester"

    approved = client.post(f"/api/admin/approve/{submission_id}", auth=ADMIN_AUTH)
    assert approved.status_code == 200
    assert approved.json() == {"message": "Submission approved", "algorithmId": "foo-bar"}

    entry = client.get("/api/algorithms/foo-bar").json()
    assert entry["name"] == "Foo Bar!"
    assert entry["approved"] is True
    assert client.get("/api/admin/submissions", auth=ADMIN_AUTH).json() == []


def test_second_approve_reports_already_reviewed(client: TestClient, submit_payload) -> None:
    submission_id = _submit(client, submit_payload()).json()["submissionId"]
    client.post(f"/api/admin/approve/{submission_id}", auth=ADMIN_AUTH)

    again = client.post(f"/api/admin/approve/{submission_id}", auth=ADMIN_AUTH)

    assert again.status_code == 404
    assert again.json()["error"]["code"] == "submission_already_reviewed"
    ids = [e["id"] for e in client.get("/api/algorithms").json()]
    assert ids.count("foo-bar") == 1


def test_reject(client: TestClient, submit_payload) -> None:
    submission_id = _submit(client, submit_payload()).json()["submissionId"]

    response = client.post(f"/api/admin/reject/{submission_id}", auth=ADMIN_AUTH)

    assert response.status_code == 200
    assert response.json() == {"message": "Submission rejected"}
    assert client.get("/api/algorithms/foo-bar").status_code == 404
    assert client.get("/api/admin/submissions", auth=ADMIN_AUTH).json() == []


def test_unknown_submission_is_404(client: TestClient) -> None:
    response = client.post("/api/admin/reject/missing", auth=ADMIN_AUTH)

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "submission_not_found"


def test_captcha_cannot_be_reused(client: TestClient, submit_payload) -> None:
    payload = submit_payload()
    assert _submit(client, payload).status_code == 200

    replay = _submit(client, payload)

    assert replay.status_code == 400
    assert replay.json()["error"]["message"] == "Invalid or expired captcha"


def test_wrong_captcha_answer(client: TestClient, submit_payload) -> None:
    payload = submit_payload()
    payload["captchaAnswer"] += 1

    response = _submit(client, payload)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_captcha"


def test_missing_required_fields(client: TestClient, submit_payload) -> None:
    response = _submit(client, submit_payload(description=""))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "missing_required_fields"


def test_malformed_body(client: TestClient) -> None:
    response = client.post(
        "/api/submit", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "invalid_request_body"


def test_oversize_body_is_413(client: TestClient, submit_payload) -> None:
    payload = submit_payload(description="x" * (1024 * 1024))

    response = _submit(client, payload)

    assert response.status_code == 413
    assert response.json()["error"]["code"] == "payload_too_large"


def test_sixth_submission_in_window_is_429(client: TestClient, submit_payload) -> None:
    for i in range(5):
        assert _submit(client, submit_payload(f"Algo {i}")).status_code == 200

    blocked = _submit(client, submit_payload("Algo 5"))

    assert blocked.status_code == 429
    assert blocked.json()["error"]["message"] == "Too many submissions. Please try again later."
    assert "Retry-After" in blocked.headers
    assert len(client.get("/api/admin/submissions", auth=ADMIN_AUTH).json()) == 5


def test_submit_limit_resets_after_window(client: TestClient, submit_payload, clock: FakeClock) -> None:
    for i in range(5):
        _submit(client, submit_payload(f"Algo {i}"))

    clock.advance(60)

    assert _submit(client, submit_payload("Late")).status_code == 200


def test_submit_limit_is_per_client_ip(client: TestClient, submit_payload) -> None:
    for i in range(5):
        _submit(client, submit_payload(f"Algo {i}"))

    response = client.post(
        "/api/submit",
        json=submit_payload("Other"),
        headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )

    assert response.status_code == 200


def test_submission_survives_restart(tmp_path: Path, submit_payload, client: TestClient) -> None:
    submission_id = _submit(client, submit_payload()).json()["submissionId"]

    data_file = tmp_path / "data" / "data.json"
    on_disk = json.loads(data_file.read_text(encoding="utf-8"))
    assert on_disk["submissions"][0]["id"] == submission_id

    cfg = make_settings(tmp_path)
    with TestClient(create_app(cfg, container=build_container(cfg))) as restarted:
        pending = restarted.get("/api/admin/submissions", auth=ADMIN_AUTH).json()

    assert [s["id"] for s in pending] == [submission_id]


def test_cors_preflight(client: TestClient) -> None:
    response = client.options(
        "/api/submit",
        headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
