"""Request signing backed by botocore's S3 signers.

Dependencies:
    - botocore
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from botocore.auth import HmacV1Auth, S3SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.config import Config
from botocore.credentials import Credentials

SIGNATURE_VERSIONS = ("s3v4", "s3")


def _is_streaming(body: Any) -> bool:
    return body is not None and not isinstance(body, (bytes, bytearray, str))


class StaticCredential:
    """Fixed access key pair bound to one store hostname.

    ``s3v4`` signs with AWS Signature Version 4. ``s3`` selects the legacy
    HMAC-SHA1 scheme still spoken by older S3-compatible stores.
    """

    def __init__(
        self,
        access_key_id: str,
        secret_access_key: str,
        hostname: str,
        *,
        region: str = "us-east-1",
        session_token: str | None = None,
        signature_version: str = "s3v4",
    ) -> None:
        if signature_version not in SIGNATURE_VERSIONS:
            raise ValueError(
                f"Unsupported signature version {signature_version!r}; "
                f"expected one of {', '.join(SIGNATURE_VERSIONS)}"
            )
        self._credentials = Credentials(access_key_id, secret_access_key, session_token)
        self._hostname = hostname
        self._region = region
        self._signature_version = signature_version

    @property
    def signature_version(self) -> str:
        return self._signature_version

    def hostname(self) -> str:
        return self._hostname

    def sign(
        self,
        request: AWSRequest,
        *,
        bucket: str | None = None,
        key: str | None = None,
    ) -> AWSRequest:
        if self._signature_version == "s3":
            # The v1 string-to-sign uses the path-style resource even when
            # the request itself is virtual-hosted.
            if bucket:
                request.auth_path = f"/{bucket}/{quote(key or '', safe='/~')}"
            HmacV1Auth(self._credentials).add_auth(request)
            return request

        if _is_streaming(request.data):
            request.context["client_config"] = Config(
                s3={"payload_signing_enabled": False}
            )
        S3SigV4Auth(self._credentials, "s3", self._region).add_auth(request)
        return request
