"""Shared test fixtures for the cloudinify test suite."""

from __future__ import annotations

import json
import re
from collections.abc import Callable

import httpx
import pytest

from cloudinify.client import CloudinifyClient
from cloudinify.config import CloudinifyConfig

SECURE_URL = "https://res.cloudinary.com/c/image/upload/v1/x.png"


def upload_body(**overrides) -> dict:
    """A realistic upload response body."""
    body = {
        "public_id": "x",
        "secure_url": SECURE_URL,
        "version": 1,
        "format": "png",
        "resource_type": "image",
        "bytes": 1234,
    }
    body.update(overrides)
    return body


class RecordingHandler:
    """``httpx.MockTransport`` handler that records every request it sees."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self._respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._respond(request)


def parse_multipart(request: httpx.Request) -> dict[str, tuple[str | None, bytes]]:
    """Split a multipart/form-data request into ``{name: (filename, value)}``."""
    content_type = request.headers["content-type"]
    assert content_type.startswith("multipart/form-data; boundary=")
    boundary = content_type.split("boundary=", 1)[1].encode()
    body = request.read()
    assert body.endswith(b"--" + boundary + b"--\r\n")

    fields: dict[str, tuple[str | None, bytes]] = {}
    for part in body.split(b"--" + boundary)[1:-1]:
        head, _, value = part[2:-2].partition(b"\r\n\r\n")
        disposition = head.decode()
        name = re.search(r'name="([^"]*)"', disposition).group(1)
        filename = re.search(r'filename="([^"]*)"', disposition)
        fields[name] = (filename.group(1) if filename else None, value)
    return fields


def json_response(status_code: int = 200, body: object = None, headers: dict | None = None):
    """Build a responder returning *body* as JSON."""
    content = json.dumps(upload_body() if body is None else body).encode()

    def respond(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code,
            content=content,
            headers={"Content-Type": "application/json", **(headers or {})},
        )

    return respond


@pytest.fixture
def config() -> CloudinifyConfig:
    """Default test configuration with dummy credentials."""
    return CloudinifyConfig(cloud_name="cloudname", api_key="login", api_secret="secret")


@pytest.fixture
def handler() -> RecordingHandler:
    """Handler answering every request with a successful upload."""
    return RecordingHandler(json_response())


@pytest.fixture
def http_client(handler: RecordingHandler):
    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        yield client


@pytest.fixture
def client(config: CloudinifyConfig, http_client: httpx.Client) -> CloudinifyClient:
    """Client wired to the recording mock transport."""
    return CloudinifyClient(config, http_client=http_client)
