"""Shared fixtures for the auth middleware tests."""

import socket
from typing import Callable

import httpx
import pytest
from starlette.applications import Starlette

from tests.helpers import build_app


@pytest.fixture
def app() -> Starlette:
    return build_app()


@pytest.fixture
def identity_calls() -> list:
    return []


@pytest.fixture
def identity_transport(identity_calls) -> Callable[[Callable], httpx.AsyncClient]:
    """Build an AsyncClient whose identity service is the given handler."""

    def factory(handler: Callable) -> httpx.AsyncClient:
        def recording(request: httpx.Request):
            identity_calls.append(request)
            return handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(recording), timeout=5.0)

    return factory


@pytest.fixture
def silent_identity_url():
    """URL of a local listener that accepts connections and never answers."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(8)
    host, port = sock.getsockname()
    try:
        yield f"http://{host}:{port}/v1/validate"
    finally:
        sock.close()
