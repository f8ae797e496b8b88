"""
Tests for SignatureVerificationMiddleware
=========================================
Signed requests pass with their body intact; tampering is rejected.
"""

import pytest
from starlette.requests import ClientDisconnect, Request
from starlette.testclient import TestClient

from tests.helpers import SECRET
from service_auth.config import SignatureConfig
from service_auth.middleware import SignatureVerificationMiddleware
from service_auth.signing import SignatureAuth, generate_signature

ORDER_BODY = b'{"qty": 2}'


def create_client(app, allow_unsigned_empty=False, excluded_paths=frozenset()):
    app.add_middleware(
        SignatureVerificationMiddleware,
        config=SignatureConfig(
            secret=SECRET,
            allow_unsigned_empty=allow_unsigned_empty,
            excluded_paths=excluded_paths,
        ),
    )
    return TestClient(app)


def signed(method, path, params=None, body=b""):
    return {"X-Signature": generate_signature(method, path, params, body, SECRET)}


def test_valid_signature_passes_and_body_is_replayed(app):
    client = create_client(app)

    response = client.post(
        "/orders",
        params={"b": "2", "a": "1"},
        content=ORDER_BODY,
        headers=signed("POST", "/orders", {"a": "1", "b": "2"}, ORDER_BODY),
    )

    assert response.status_code == 200
    assert response.json()["body"] == ORDER_BODY.decode()
    assert response.json()["raw_body"] == ORDER_BODY.decode()


def test_reformatted_body_still_passes(app):
    """Signature is computed over compact JSON, client sends it pretty-printed."""
    client = create_client(app)
    pretty = b'{\n  "qty": 2\n}'

    response = client.post("/orders", content=pretty, headers=signed("POST", "/orders", None, b'{"qty":2}'))

    assert response.status_code == 200
    # Downstream sees the bytes as sent, not the normalized form
    assert response.json()["body"] == pretty.decode()


def test_signature_auth_client_passes(app):
    client = create_client(app)

    response = client.put(
        "/orders/7",
        params={"dry_run": "true"},
        content=ORDER_BODY,
        auth=SignatureAuth(SECRET),
    )

    assert response.status_code == 200


@pytest.mark.parametrize("method,path,params,body", [
    ("PUT", "/orders", {"a": "1"}, ORDER_BODY),
    ("POST", "/orders/1", {"a": "1"}, ORDER_BODY),
    ("POST", "/orders", {"a": "2"}, ORDER_BODY),
    ("POST", "/orders", {"a": "1", "b": "1"}, ORDER_BODY),
    ("POST", "/orders", {"a": "1"}, b'{"qty": 20}'),
])
def test_tampered_request_rejected(app, method, path, params, body):
    client = create_client(app)
    headers = signed("POST", "/orders", {"a": "1"}, ORDER_BODY)

    response = client.request(method, path, params=params, content=body, headers=headers)

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["message"] == "signature mismatch"
    assert payload["error"]["code"] == "SIGNATURE_MISMATCH"


def test_wrong_secret_rejected(app):
    client = create_client(app)
    headers = {"X-Signature": generate_signature("POST", "/orders", None, ORDER_BODY, "other-secret")}

    response = client.post("/orders", content=ORDER_BODY, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "SIGNATURE_MISMATCH"


def test_missing_signature_rejected(app):
    client = create_client(app)

    response = client.post("/orders", content=ORDER_BODY)

    assert response.status_code == 400
    payload = response.json()
    assert payload["success"] is False
    assert payload["message"] == "missing signature"
    assert payload["error"]["code"] == "MISSING_SIGNATURE"


def test_health_without_signature_rejected_by_default(app):
    client = create_client(app)

    response = client.get("/health")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_SIGNATURE"


def test_health_without_signature_passes_with_exemption(app):
    client = create_client(app, allow_unsigned_empty=True)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["raw_body"] == ""


@pytest.mark.parametrize("params,body", [
    ({"verbose": "1"}, b""),
    (None, ORDER_BODY),
])
def test_exemption_requires_empty_request(app, params, body):
    client = create_client(app, allow_unsigned_empty=True)

    response = client.request("POST", "/health", params=params, content=body)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_SIGNATURE"


def test_exemption_does_not_bypass_bad_signature(app):
    client = create_client(app, allow_unsigned_empty=True)

    response = client.get("/health", headers={"X-Signature": "0" * 64})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "SIGNATURE_MISMATCH"


def test_excluded_path_skips_verification(app):
    client = create_client(app, excluded_paths=frozenset({"/metrics"}))

    response = client.get("/metrics")

    assert response.status_code == 200
    assert response.json()["raw_body"] is None


def test_unreadable_body_rejected(app, monkeypatch):
    async def broken_body(self):
        raise ClientDisconnect()

    monkeypatch.setattr(Request, "body", broken_body)
    client = create_client(app)

    response = client.post("/orders", content=ORDER_BODY, headers=signed("POST", "/orders", None, ORDER_BODY))

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "BODY_UNPROCESSABLE"


def test_secret_passed_directly(app):
    app.add_middleware(SignatureVerificationMiddleware, secret=SECRET)
    client = TestClient(app)

    response = client.get("/ping", headers=signed("GET", "/ping"))

    assert response.status_code == 200


def test_encoded_question_mark_in_path_passes(app):
    """The decoded path, including a literal "?", is what gets signed."""
    client = create_client(app)

    response = client.get("/files/a%3Fb.txt", params={"v": "2"}, auth=SignatureAuth(SECRET))

    assert response.status_code == 200
    assert response.json()["path"] == "/files/a?b.txt"


@pytest.mark.parametrize("raw_path,decoded_path", [
    ("/files/a%3Fb.txt", "/files/a?b.txt"),
    ("/files/a%23b.txt", "/files/a#b.txt"),
    ("/files/a%20b.txt", "/files/a b.txt"),
])
def test_signature_over_decoded_path(app, raw_path, decoded_path):
    client = create_client(app)

    response = client.get(raw_path, headers=signed("GET", decoded_path))

    assert response.status_code == 200


def test_truncated_path_signature_rejected(app):
    client = create_client(app)

    response = client.get("/files/a%3Fb.txt", headers=signed("GET", "/files/a"))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "SIGNATURE_MISMATCH"
