"""Encode out-of-band meta objects."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jsonapi_marshal.fields import get_meta_specs
from jsonapi_marshal.serializers.base import OMITTED, encode_attribute


def encode_meta(meta: Any) -> dict[str, Any] | None:
    """Return the meta member for a document.

    Every tagged field of ``meta`` is encoded like an attribute. Related
    objects are stored as they are, never visited. Mappings are copied.
    """
    if meta is None:
        return None
    if isinstance(meta, Mapping):
        return dict(meta)
    node: dict[str, Any] = {}
    for spec in get_meta_specs(type(meta)):
        encoded = encode_attribute(spec, spec.get_value(meta))
        if encoded is not OMITTED:
            node[spec.wire_name] = encoded
    return node
