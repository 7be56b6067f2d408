"""Tests for botocore-backed request signing."""

from __future__ import annotations

import base64
import hashlib
import hmac
import io

import pytest
from botocore.awsrequest import AWSRequest

from s3lite.infra.storage.auth import StaticCredential

EMPTY_SHA256 = hashlib.sha256(b"").hexdigest()


@pytest.fixture
def credential():
    return StaticCredential("AKIDEXAMPLE", "secret", "s3.example.com", region="eu-west-1")


def test_hostname(credential):
    assert credential.hostname() == "s3.example.com"


def test_sigv4_signs_empty_payload(credential):
    request = AWSRequest(method="GET", url="http://photos.s3.example.com/cat.jpg")

    signed = credential.sign(request, bucket="photos", key="cat.jpg")

    assert signed is request
    auth = request.headers["Authorization"]
    assert auth.startswith("AWS4-HMAC-SHA256 Credential=AKIDEXAMPLE/")
    assert "/eu-west-1/s3/aws4_request" in auth
    assert "X-Amz-Date" in request.headers
    assert request.headers["X-Amz-Content-SHA256"] == EMPTY_SHA256


def test_sigv4_streaming_body_is_unsigned(credential):
    request = AWSRequest(
        method="PUT",
        url="http://photos.s3.example.com/cat.jpg",
        headers={"Content-Length": "5"},
        data=io.BytesIO(b"hello"),
    )

    credential.sign(request, bucket="photos", key="cat.jpg")

    assert request.headers["X-Amz-Content-SHA256"] == "UNSIGNED-PAYLOAD"


def test_sigv4_bytes_body_is_hashed(credential):
    request = AWSRequest(
        method="PUT", url="http://photos.s3.example.com/cat.jpg", data=b"hello"
    )

    credential.sign(request, bucket="photos", key="cat.jpg")

    assert request.headers["X-Amz-Content-SHA256"] == hashlib.sha256(b"hello").hexdigest()


def test_session_token_is_sent():
    credential = StaticCredential(
        "AKIDEXAMPLE", "secret", "s3.example.com", session_token="token-123"
    )
    request = AWSRequest(method="GET", url="http://s3.example.com/")

    credential.sign(request)

    assert request.headers["X-Amz-Security-Token"] == "token-123"


def test_hmac_v1_uses_path_style_resource():
    credential = StaticCredential(
        "AKIDEXAMPLE", "secret", "s3.example.com", signature_version="s3"
    )
    request = AWSRequest(method="DELETE", url="http://photos.s3.example.com/cat.jpg")

    credential.sign(request, bucket="photos", key="cat.jpg")

    assert request.auth_path == "/photos/cat.jpg"
    string_to_sign = f"DELETE\n\n\n{request.headers['Date']}\n/photos/cat.jpg"
    expected = base64.b64encode(
        hmac.new(b"secret", string_to_sign.encode(), hashlib.sha1).digest()
    ).decode()
    assert request.headers["Authorization"] == f"AWS AKIDEXAMPLE:{expected}"


def test_unknown_signature_version():
    with pytest.raises(ValueError, match="signature version"):
        StaticCredential("a", "b", "s3.example.com", signature_version="v2")
