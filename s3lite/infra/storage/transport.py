"""HTTP transport backed by a pooled ``requests.Session``."""

from __future__ import annotations

import requests
from botocore.awsrequest import AWSRequest


class RequestsTransport:
    """Sends signed requests through one shared ``requests.Session``.

    Responses are always opened with ``stream=True`` so object downloads are
    handed to the caller unread. The default round-trip timeout is 120
    seconds.
    """

    def __init__(
        self, session: requests.Session | None = None, timeout: float = 120
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout

    def prepare(self, request: AWSRequest) -> requests.PreparedRequest:
        """Build the wire request, keeping a caller-supplied Content-Length.

        ``requests`` falls back to chunked encoding for bodies it cannot
        size (pipes, sockets, generators) and would send both headers.
        """
        prepared = self._session.prepare_request(
            requests.Request(
                method=request.method,
                url=request.url,
                headers=dict(request.headers.items()),
                data=request.data,
            )
        )
        if "Content-Length" in request.headers:
            prepared.headers.pop("Transfer-Encoding", None)
            prepared.headers["Content-Length"] = request.headers["Content-Length"]
        return prepared

    def execute(self, request: AWSRequest) -> requests.Response:
        prepared = self.prepare(request)
        settings = self._session.merge_environment_settings(
            prepared.url, {}, True, None, None
        )
        settings["stream"] = True
        return self._session.send(
            prepared,
            allow_redirects=False,
            timeout=self._timeout,
            **settings,
        )

    def close(self) -> None:
        self._session.close()
