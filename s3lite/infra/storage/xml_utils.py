"""Decoders for the S3 XML response documents.

Both functions are pure: raw response bytes in, typed values out. Element
matching ignores XML namespaces because AWS qualifies every element with
``http://s3.amazonaws.com/doc/2006-03-01/`` while several compatible stores
send unqualified documents.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET

from s3lite.infra.storage.client import Bucket, Item, ListPage, MalformedResponseError


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _parse_root(data: bytes, expected: str) -> ET.Element:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as exc:
        raise MalformedResponseError(f"s3: invalid XML in response: {exc}") from exc
    if _local(root.tag) != expected:
        raise MalformedResponseError(
            f"s3: expected <{expected}> document, got <{_local(root.tag)}>"
        )
    return root


def _child(element: ET.Element, name: str) -> ET.Element | None:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local(child.tag) == name]


def _text(element: ET.Element, name: str) -> str | None:
    child = _child(element, name)
    if child is None:
        return None
    return child.text or ""


def parse_list_all_my_buckets(data: bytes) -> list[Bucket]:
    """Decode a ``ListAllMyBucketsResult`` document.

    Raises:
        MalformedResponseError: If the document is not valid XML, has the
            wrong root element, lacks the ``<Buckets>`` envelope, or holds a
            bucket without a name.
    """
    root = _parse_root(data, "ListAllMyBucketsResult")
    envelope = _child(root, "Buckets")
    if envelope is None:
        raise MalformedResponseError("s3: bucket list response missing <Buckets>")

    buckets: list[Bucket] = []
    for entry in _children(envelope, "Bucket"):
        name = _text(entry, "Name")
        if not name:
            raise MalformedResponseError("s3: bucket entry missing <Name>")
        buckets.append(
            Bucket(name=name, creation_date=_text(entry, "CreationDate") or "")
        )
    return buckets


def parse_list_bucket_result(data: bytes) -> ListPage:
    """Decode a ``ListBucketResult`` page.

    A missing ``<IsTruncated>`` element reads as not truncated.

    Raises:
        MalformedResponseError: On invalid XML, a wrong root element, a
            ``<Contents>`` entry without ``<Key>``, or a non-integer size.
    """
    root = _parse_root(data, "ListBucketResult")

    items: list[Item] = []
    for entry in _children(root, "Contents"):
        key = _text(entry, "Key")
        if key is None:
            raise MalformedResponseError("s3: listing entry missing <Key>")
        raw_size = (_text(entry, "Size") or "0").strip()
        try:
            size = int(raw_size)
        except ValueError as exc:
            raise MalformedResponseError(
                f"s3: invalid <Size> {raw_size!r} for key {key!r}"
            ) from exc
        items.append(Item(key=key, size=size))

    truncated = (_text(root, "IsTruncated") or "").strip().lower()
    if truncated not in {"", "true", "false"}:
        raise MalformedResponseError(f"s3: invalid <IsTruncated> {truncated!r}")
    return ListPage(items=items, is_truncated=truncated == "true")
