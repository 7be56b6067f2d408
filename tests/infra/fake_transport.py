"""In-memory transport for exercising the object store client."""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, urlsplit

import requests
from botocore.awsrequest import AWSRequest


def make_response(
    status_code: int = 200,
    body: bytes = b"",
    headers: dict[str, str] | None = None,
) -> requests.Response:
    """Build an unread ``requests.Response`` backed by an in-memory body."""
    response = requests.Response()
    response.status_code = status_code
    response.raw = io.BytesIO(body)
    response.headers.update(headers or {})
    return response


def list_page(keys: list[str], truncated: bool, size: int = 1) -> bytes:
    """Render a ListBucketResult document as S3 sends it."""
    contents = "".join(
        f"<Contents><Key>{key}</Key><Size>{size}</Size></Contents>" for key in keys
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<ListBucketResult xmlns="http://s3.amazonaws.com/doc/2006-03-01/">'
        "<Name>photos</Name>"
        f"<IsTruncated>{'true' if truncated else 'false'}</IsTruncated>"
        f"{contents}"
        "</ListBucketResult>"
    ).encode()


@dataclass
class RecordedRequest:
    method: str
    url: str
    headers: dict[str, str]
    data: Any

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    @property
    def host(self) -> str:
        return urlsplit(self.url).netloc

    @property
    def query(self) -> dict[str, list[str]]:
        return parse_qs(urlsplit(self.url).query, keep_blank_values=True)


@dataclass
class FakeTransport:
    """Replays queued responses in order and records every request."""

    responses: list[Any] = field(default_factory=list)
    requests: list[RecordedRequest] = field(default_factory=list)

    def queue(
        self,
        status_code: int = 200,
        body: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        response = make_response(status_code, body, headers)
        self.responses.append(response)
        return response

    def fail_with(self, exc: Exception) -> None:
        self.responses.append(exc)

    def execute(self, request: AWSRequest) -> requests.Response:
        self.requests.append(
            RecordedRequest(
                method=request.method,
                url=request.url,
                headers=dict(request.headers.items()),
                data=request.data,
            )
        )
        if not self.responses:
            raise AssertionError(f"unexpected request {request.method} {request.url}")
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@dataclass
class FakeCredential:
    """Credential that stamps a recognisable Authorization header."""

    host: str = "s3.example.com"
    signed: list[tuple[str | None, str | None]] = field(default_factory=list)

    def hostname(self) -> str:
        return self.host

    def sign(
        self,
        request: AWSRequest,
        *,
        bucket: str | None = None,
        key: str | None = None,
    ) -> AWSRequest:
        self.signed.append((bucket, key))
        request.headers["Authorization"] = "FAKE test-key:signature"
        return request
