from __future__ import annotations

import logging

import pytest

from s3lite.common.config import get_settings
from s3lite.infra.storage.s3_client import ObjectStoreClient
from tests.infra.fake_transport import FakeCredential, FakeTransport


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch, tmp_path):
    # Keep a developer's .env out of the tests.
    monkeypatch.setattr("s3lite.common.config.ENV_FILE", tmp_path / ".env")
    get_settings.cache_clear()  # type: ignore[attr-defined]
    yield
    get_settings.cache_clear()  # type: ignore[attr-defined]


@pytest.fixture(autouse=True)
def restore_s3lite_logger():
    root = logging.getLogger("s3lite")
    handlers, level, propagate = list(root.handlers), root.level, root.propagate
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    root.propagate = propagate


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def credential() -> FakeCredential:
    return FakeCredential()


@pytest.fixture
def client(credential, transport) -> ObjectStoreClient:
    return ObjectStoreClient(credential=credential, transport=transport)
