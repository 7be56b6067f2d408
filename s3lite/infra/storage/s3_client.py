"""S3-compatible object store REST client.

This module issues signed HTTP requests against a virtual-hosted endpoint
(``bucket.hostname/key``) and maps responses onto typed results and the
error taxonomy in :mod:`s3lite.infra.storage.client`.

Dependencies:
    - botocore (request model and signing)
    - requests (default transport)
    - prometheus_client (request metrics)
"""

from __future__ import annotations

import base64
import logging
import time
from typing import IO, TYPE_CHECKING, Any
from urllib.parse import quote

from botocore.awsrequest import AWSRequest

from s3lite import __version__
from s3lite.infra.observability.metrics import LATENCY, REQUESTS
from s3lite.infra.storage.client import (
    Bucket,
    Credential,
    InvalidArgumentError,
    Item,
    MalformedResponseError,
    ObjectNotFoundError,
    ProtocolViolationError,
    Response,
    Transport,
    UnexpectedStatusError,
)
from s3lite.infra.storage.xml_utils import (
    parse_list_all_my_buckets,
    parse_list_bucket_result,
)

if TYPE_CHECKING:
    from s3lite.common.config import Settings

# Largest page the store hands out for a single listing request.
MAX_LIST = 1000

USER_AGENT = f"s3lite/{__version__}"

logger = logging.getLogger("s3lite.http")


def _content_length(response: Response) -> int | None:
    raw = response.headers.get("Content-Length")
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise MalformedResponseError(f"s3: invalid Content-Length {raw!r}") from exc


def _encode_md5(md5: Any) -> str:
    digest = md5 if isinstance(md5, (bytes, bytearray)) else md5.digest()
    return base64.b64encode(digest).decode("ascii")


class ObjectStoreClient:
    """Client for one S3-compatible store.

    Holds no per-call state; a single instance can be shared across threads
    as long as the transport allows it.
    """

    def __init__(
        self,
        *,
        credential: Credential,
        transport: Transport,
        secure: bool = False,
        max_list: int = MAX_LIST,
        trace_http: bool = False,
        enable_metrics: bool = True,
    ) -> None:
        """Initialize the client with its collaborators.

        Args:
            credential: Signs requests and names the store hostname.
            transport: Executes signed requests.
            secure: Use https instead of http.
            max_list: Per-request cap for listing pages.
            trace_http: Log every round trip at INFO instead of DEBUG.
            enable_metrics: Record prometheus request metrics.
        """
        if max_list < 1:
            raise ValueError("max_list must be positive")
        self._credential = credential
        self._transport = transport
        self._scheme = "https" if secure else "http"
        self._max_list = max_list
        self._trace_http = trace_http
        self._enable_metrics = enable_metrics

    @classmethod
    def from_settings(cls, settings: "Settings | None" = None) -> "ObjectStoreClient":
        """Build a client with the default collaborators from settings.

        Logging is left to the application; see
        :func:`s3lite.common.logging.setup_logging`.

        Raises:
            ValueError: If the access key pair is not configured.
        """
        from s3lite.common.config import get_settings
        from s3lite.infra.storage.auth import StaticCredential
        from s3lite.infra.storage.transport import RequestsTransport

        settings = settings or get_settings()
        if not settings.S3_ACCESS_KEY_ID or not settings.S3_SECRET_ACCESS_KEY:
            raise ValueError(
                "S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY are required "
                "to build an object store client."
            )
        credential = StaticCredential(
            settings.S3_ACCESS_KEY_ID,
            settings.S3_SECRET_ACCESS_KEY,
            settings.S3_HOSTNAME,
            region=settings.S3_REGION,
            session_token=settings.S3_SESSION_TOKEN,
            signature_version=settings.S3_SIGNATURE_VERSION,
        )
        return cls(
            credential=credential,
            transport=RequestsTransport(timeout=settings.S3_TIMEOUT),
            secure=settings.S3_USE_SSL,
            max_list=settings.S3_MAX_LIST,
            trace_http=settings.TRACE_HTTP,
            enable_metrics=settings.ENABLE_METRICS,
        )

    def _service_url(self) -> str:
        return f"{self._scheme}://{self._credential.hostname()}/"

    def _object_url(self, bucket: str, object_key: str = "") -> str:
        return (
            f"{self._scheme}://{bucket}.{self._credential.hostname()}/"
            f"{quote(object_key, safe='/~')}"
        )

    def _send(
        self,
        operation: str,
        method: str,
        url: str,
        *,
        bucket: str | None = None,
        object_key: str | None = None,
        headers: dict[str, str] | None = None,
        data: Any = None,
    ) -> Response:
        request = AWSRequest(method=method, url=url, headers=headers or {}, data=data)
        request.headers["User-Agent"] = USER_AGENT
        self._credential.sign(request, bucket=bucket, key=object_key)

        start = time.perf_counter()
        try:
            response = self._transport.execute(request)
        except Exception:
            if self._enable_metrics:
                REQUESTS.labels(operation, method, "error").inc()
            raise
        elapsed = time.perf_counter() - start

        if self._enable_metrics:
            REQUESTS.labels(operation, method, str(response.status_code)).inc()
            LATENCY.labels(operation, method).observe(elapsed)

        duration_ms = round(elapsed * 1000, 3)
        target = url.split("?", 1)[0]
        logger.log(
            logging.INFO if self._trace_http else logging.DEBUG,
            "s3 request operation=%s method=%s url=%s status=%s duration_ms=%.3f",
            operation,
            method,
            target,
            response.status_code,
            duration_ms,
            extra={
                "extra": {
                    "operation": operation,
                    "method": method,
                    "url": target,
                    "status": response.status_code,
                    "duration_ms": duration_ms,
                }
            },
        )
        return response

    def _unexpected(self, operation: str, response: Response) -> UnexpectedStatusError:
        """Drain and release ``response`` and build the matching error."""
        try:
            body = response.content or b""
        finally:
            response.close()
        logger.warning(
            "s3 unexpected status operation=%s status=%s",
            operation,
            response.status_code,
            extra={"extra": {"operation": operation, "status": response.status_code}},
        )
        return UnexpectedStatusError(operation, response.status_code, body)

    def list_all_buckets(self) -> list[Bucket]:
        """Enumerate every bucket owned by the credential.

        Raises:
            UnexpectedStatusError: If the store does not answer 200.
            MalformedResponseError: If the bucket list cannot be decoded.
        """
        response = self._send("list_all_buckets", "GET", self._service_url())
        if response.status_code != 200:
            raise self._unexpected("list_all_buckets", response)
        try:
            return parse_list_all_my_buckets(response.content)
        finally:
            response.close()

    def stat_object(self, *, bucket: str, object_key: str) -> int:
        """Return the size in bytes of an object.

        Raises:
            ObjectNotFoundError: If the store reports the key missing.
            UnexpectedStatusError: On any other non-2xx status.
            MalformedResponseError: If Content-Length is absent or invalid.
        """
        response = self._send(
            "stat_object",
            "HEAD",
            self._object_url(bucket, object_key),
            bucket=bucket,
            object_key=object_key,
        )
        if response.status_code == 404:
            response.close()
            raise ObjectNotFoundError(bucket, object_key)
        if not 200 <= response.status_code < 300:
            raise self._unexpected("stat_object", response)
        try:
            size = _content_length(response)
        finally:
            response.close()
        if size is None:
            raise MalformedResponseError("s3: HEAD response missing Content-Length")
        return size

    def object_exists(self, *, bucket: str, object_key: str) -> bool:
        try:
            self.stat_object(bucket=bucket, object_key=object_key)
        except ObjectNotFoundError:
            return False
        return True

    def put_object(
        self,
        *,
        bucket: str,
        object_key: str,
        size: int,
        body: IO[bytes] | bytes,
        md5: Any = None,
    ) -> None:
        """Upload an object.

        Args:
            bucket: Target bucket name.
            object_key: Object key in the bucket.
            size: Exact number of bytes ``body`` yields; sent as Content-Length.
            body: Object content, as bytes or a binary stream.
            md5: Optional MD5 of the content, either raw digest bytes or a
                hashlib object. Sent as Content-MD5 so the store rejects
                corrupted uploads.

        Raises:
            UnexpectedStatusError: If the store does not answer 200. The
                response body is attached for diagnostics.
        """
        headers = {"Content-Length": str(size)}
        if md5 is not None:
            headers["Content-MD5"] = _encode_md5(md5)
        response = self._send(
            "put_object",
            "PUT",
            self._object_url(bucket, object_key),
            bucket=bucket,
            object_key=object_key,
            headers=headers,
            data=body,
        )
        if response.status_code != 200:
            raise self._unexpected("put_object", response)
        response.close()

    def list_objects(
        self, *, bucket: str, start_key: str = "", max_keys: int
    ) -> list[Item]:
        """Return up to ``max_keys`` items ordered by key, starting at ``start_key``.

        Keys before ``start_key`` are never returned (it is sent as the S3
        ``marker``). A result holding exactly ``max_keys`` items carries no
        indication of whether more keys exist; call again with the last key
        as ``start_key`` to find out.

        Raises:
            InvalidArgumentError: If ``max_keys`` is negative.
            UnexpectedStatusError: If a page request does not answer 200.
            MalformedResponseError: If a page cannot be decoded.
            ProtocolViolationError: If the store returns a key before
                ``start_key``, or a truncated page that adds
                no key past the marker.
        """
        if max_keys < 0:
            raise InvalidArgumentError(f"invalid negative max_keys {max_keys}")

        items: list[Item] = []
        marker = start_key
        while len(items) < max_keys:
            fetch_n = min(max_keys - len(items), self._max_list)
            url = (
                f"{self._object_url(bucket)}?marker={quote(marker, safe='')}"
                f"&max-keys={fetch_n}"
            )
            response = self._send("list_objects", "GET", url, bucket=bucket, object_key="")
            if response.status_code != 200:
                raise self._unexpected("list_objects", response)
            try:
                page = parse_list_bucket_result(response.content)
            finally:
                response.close()

            accepted = len(items)
            for item in page.items:
                if item.key == marker and item.key != start_key:
                    # Continuation pages repeat the marker as their first entry.
                    continue
                if item.key < start_key:
                    raise ProtocolViolationError(
                        f"s3: listing returned key {item.key!r}, "
                        f"wanted greater than {start_key!r}"
                    )
                if len(items) == max_keys:
                    break
                items.append(item)
                marker = item.key
            if not page.is_truncated:
                break
            if len(items) == accepted:
                raise ProtocolViolationError(
                    f"s3: truncated listing page returned nothing after {marker!r}"
                )
        return items

    def get_object(self, *, bucket: str, object_key: str) -> tuple[IO[bytes], int]:
        """Open an object for reading.

        Returns:
            The unread body stream and the declared size (-1 if the store
            sent no Content-Length). The caller must close the stream.

        Raises:
            ObjectNotFoundError: If the store reports the key missing.
            UnexpectedStatusError: On any other non-200 status.
        """
        response = self._send(
            "get_object",
            "GET",
            self._object_url(bucket, object_key),
            bucket=bucket,
            object_key=object_key,
        )
        if response.status_code == 404:
            response.close()
            raise ObjectNotFoundError(bucket, object_key)
        if response.status_code != 200:
            raise self._unexpected("get_object", response)
        try:
            size = _content_length(response)
        except MalformedResponseError:
            response.close()
            raise
        return response.raw, -1 if size is None else size

    def delete_object(self, *, bucket: str, object_key: str) -> None:
        """Delete an object. Deleting a missing key succeeds.

        Raises:
            UnexpectedStatusError: On any status other than 200, 204 or 404.
        """
        response = self._send(
            "delete_object",
            "DELETE",
            self._object_url(bucket, object_key),
            bucket=bucket,
            object_key=object_key,
        )
        if response.status_code not in (200, 204, 404):
            raise self._unexpected("delete_object", response)
        response.close()
