"""Pytest fixtures for drivepy tests."""
import asyncio
import json
from typing import Any, Callable, Dict, List, Optional, Union

import pytest
from multidict import CIMultiDict

from drivepy.core.api import APIConfig, AsyncAPIClient, StaticTokenAuth
from drivepy.core.exceptions import TransportError
from drivepy.core.http import StaticHttpResponse


def make_response(
    status_code: int,
    body: Union[bytes, str, Dict[str, Any], None] = None,
    headers: Optional[Dict[str, str]] = None,
    content_type: Optional[str] = None
) -> StaticHttpResponse:
    """Build an in-memory response; dict bodies are sent as JSON."""
    response_headers = CIMultiDict(headers or {})
    if isinstance(body, dict):
        body = json.dumps(body).encode('utf-8')
        content_type = content_type or 'application/json'
    elif isinstance(body, str):
        body = body.encode('utf-8')
    if content_type:
        response_headers['Content-Type'] = content_type
    return StaticHttpResponse(status_code=status_code, headers=response_headers, body=body or b'')


class RecordedRequest:
    """Snapshot of a request the fake transport received."""

    def __init__(self, url: str, method: str, headers: CIMultiDict, content_type: Optional[str], body: bytes):
        self.url = url
        self.method = method
        self.headers = headers
        self.content_type = content_type
        self.body = body


class FakeRequest:
    """HttpRequest that hands itself to a FakeHttpFactory when sent."""

    def __init__(self, factory: 'FakeHttpFactory', url: str, method: str):
        self._factory = factory
        self.url = url
        self.method = method.upper()
        self.headers: CIMultiDict = CIMultiDict()
        self.content_type: Optional[str] = None
        self._body = None

    def set_body(self, body) -> None:
        self._body = body

    async def _consume_body(self) -> bytes:
        if self._body is None:
            return b''
        if isinstance(self._body, (bytes, bytearray)):
            return bytes(self._body)
        data = bytearray()
        async for chunk in self._body:
            data.extend(chunk)
        return bytes(data)

    async def get_response(self, cancel_token=None) -> StaticHttpResponse:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        body = await self._consume_body()
        recorded = RecordedRequest(self.url, self.method, CIMultiDict(self.headers), self.content_type, body)
        return await self._factory.respond(recorded)


Handler = Union[StaticHttpResponse, Exception, Callable[[RecordedRequest], StaticHttpResponse]]


class FakeHttpFactory:
    """
    Scripted in-memory transport.

    Each sent request consumes the next scripted entry: a response, an
    exception to raise, or a callable producing a response.
    """

    def __init__(self, script: Optional[List[Handler]] = None):
        self.script: List[Handler] = list(script or [])
        self.requests: List[RecordedRequest] = []
        self.closed = False

    def add(self, *handlers: Handler) -> 'FakeHttpFactory':
        self.script.extend(handlers)
        return self

    def create_request(self, url: str, method: str) -> FakeRequest:
        return FakeRequest(self, url, method)

    async def respond(self, request: RecordedRequest) -> StaticHttpResponse:
        # Yield like a real network exchange so task cancellation lands here
        await asyncio.sleep(0)
        self.requests.append(request)
        if not self.script:
            raise TransportError(f"No scripted response for {request.method} {request.url}")
        handler = self.script.pop(0)
        if isinstance(handler, Exception):
            raise handler
        if callable(handler):
            return handler(request)
        return handler

    async def close(self) -> None:
        self.closed = True

    def methods(self) -> List[str]:
        return [r.method for r in self.requests]


@pytest.fixture
def config():
    """API configuration pointing at a fake root."""
    return APIConfig(root_url='https://drive.example.test/v1.0/')


@pytest.fixture
def transport():
    """Empty scripted transport."""
    return FakeHttpFactory()


@pytest.fixture
def api_client(config, transport):
    """AsyncAPIClient wired to the scripted transport."""
    return AsyncAPIClient(config, auth=StaticTokenAuth('test-token'), http_factory=transport)


@pytest.fixture
def sample_item():
    """Returns a finished item body."""
    return {
        'id': 'ITEM123',
        'name': 'report.bin',
        'size': 10485760,
        'eTag': 'aRTEwMjE2',
    }


@pytest.fixture
def sample_error():
    """Returns a three-level service error body."""
    return {
        'error': {
            'code': 'accessDenied',
            'message': 'Access denied',
            'innererror': {
                'code': 'quotaLimitReached',
                'message': 'Quota reached',
                'innererror': {
                    'code': 'storageFull',
                    'message': '',
                },
            },
        }
    }
