"""Object storage client layer.

This package provides a REST client for S3 and S3-compatible object stores
(MinIO, Ceph RGW and similar), with pluggable transport and signing.
"""

from .client import (
    Bucket,
    Credential,
    InvalidArgumentError,
    Item,
    ListPage,
    MalformedResponseError,
    ObjectNotFoundError,
    ProtocolViolationError,
    StorageError,
    Transport,
    UnexpectedStatusError,
)
from .s3_client import MAX_LIST, ObjectStoreClient

__all__ = [
    "Bucket",
    "Credential",
    "InvalidArgumentError",
    "Item",
    "ListPage",
    "MAX_LIST",
    "MalformedResponseError",
    "ObjectNotFoundError",
    "ObjectStoreClient",
    "ProtocolViolationError",
    "StorageError",
    "Transport",
    "UnexpectedStatusError",
]
