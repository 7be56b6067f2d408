"""Object storage data types, collaborator protocols and errors.

The client in :mod:`s3lite.infra.storage.s3_client` only talks to its
collaborators through the ``Transport`` and ``Credential`` protocols defined
here, so either side can be swapped (a pooled session, a fake for tests,
a different signing scheme) without touching request construction.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Protocol

if TYPE_CHECKING:
    from botocore.awsrequest import AWSRequest


class StorageError(RuntimeError):
    """Raised when object storage operations fail."""


class UnexpectedStatusError(StorageError):
    """The store answered with a status outside the operation's accepted set."""

    def __init__(self, operation: str, status_code: int, body: bytes = b"") -> None:
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(f"s3: unexpected status code {status_code} on {operation}")


class MalformedResponseError(StorageError):
    """A successful response could not be decoded."""


class ProtocolViolationError(StorageError):
    """The store returned data that breaks the listing contract."""


class InvalidArgumentError(StorageError, ValueError):
    """A caller-supplied argument was rejected before any request was sent."""


class ObjectNotFoundError(LookupError):
    """The requested object does not exist.

    Kept outside the ``StorageError`` hierarchy: a missing key is an
    expected outcome callers branch on, not a failure of the store.
    """

    def __init__(self, bucket: str, key: str) -> None:
        self.bucket = bucket
        self.key = key
        super().__init__(f"s3: object {key!r} not found in bucket {bucket!r}")


@dataclass(frozen=True, slots=True)
class Bucket:
    """A bucket entry from the service-level bucket enumeration."""

    name: str
    creation_date: str  # 2006-02-03T16:45:09.000Z


@dataclass(frozen=True, slots=True)
class Item:
    """A key entry from a bucket listing page."""

    key: str
    size: int


@dataclass(frozen=True, slots=True)
class ListPage:
    """One decoded page of a bucket listing."""

    items: list[Item] = field(default_factory=list)
    is_truncated: bool = False


class Response(Protocol):
    """The subset of ``requests.Response`` the client relies on."""

    status_code: int
    headers: Mapping[str, str]
    raw: Any

    @property
    def content(self) -> bytes: ...

    def close(self) -> None: ...


class Transport(Protocol):
    """Executes a fully built and signed request.

    Implementations must be safe for concurrent use. Network failures are
    raised unchanged; the client never retries.
    """

    def execute(self, request: "AWSRequest") -> Response:
        """Send ``request`` and return the response with an unread body."""
        ...


class Credential(Protocol):
    """Signs outgoing requests for a single store endpoint."""

    def hostname(self) -> str:
        """Return the store hostname used for virtual-hosted addressing."""
        ...

    def sign(
        self,
        request: "AWSRequest",
        *,
        bucket: str | None = None,
        key: str | None = None,
    ) -> "AWSRequest":
        """Add authentication material to ``request`` and return it.

        Args:
            request: The request to sign. Headers may be modified in place.
            bucket: Bucket the request addresses, if any.
            key: Object key the request addresses, if any.
        """
        ...
