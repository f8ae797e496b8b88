"""Shared constants, models and the echo app used across the test suites."""

from typing import Optional

from pydantic import BaseModel
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from service_auth.context import get_auth_context

SECRET = "s3cr3t-key-of-32-bytes-minimum12"
IDENTITY_SECRET = "identity-service-shared-secret-01"
IDENTITY_URL = "http://identity.internal/v1/validate"


class User(BaseModel):
    id: str
    email: Optional[str] = None


async def echo(request: Request) -> JSONResponse:
    """Downstream handler exposing what the middlewares left behind."""
    body = await request.body()
    context = get_auth_context(request)
    identity = context.identity
    return JSONResponse({
        "path": request.scope["path"],
        "body": body.decode(),
        "raw_body": context.raw_body.decode() if context.raw_body is not None else None,
        "identity": identity.model_dump() if identity is not None else None,
    })


def build_app() -> Starlette:
    methods = ["GET", "POST", "PUT", "PATCH", "DELETE"]
    return Starlette(routes=[Route("/{rest:path}", echo, methods=methods)])
