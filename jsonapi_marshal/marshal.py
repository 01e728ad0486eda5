"""Marshal annotated objects into JSON:API payloads.

The ``marshal_*`` functions return payload models; the ``marshal_*_payload``
functions write the encoded document to a text stream instead::

    with open("people.json", "w") as fh:
        marshal_many_payload(people, fh)
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, TextIO

from pydantic_core import to_jsonable_python

from jsonapi_marshal import config
from jsonapi_marshal.core.document import JSONAPIDocumentBuilder
from jsonapi_marshal.exceptions import ExpectedSequence
from jsonapi_marshal.schemas.resource import ManyPayload, OnePayload
from jsonapi_marshal.serializers.base import IncludedSet, JSONAPISerializer
from jsonapi_marshal.serializers.meta import encode_meta

_builder = JSONAPIDocumentBuilder()


def marshal_one(model: Any) -> OnePayload:
    """Return a payload for one object with related objects sideloaded."""
    included = IncludedSet()
    node = JSONAPISerializer().to_node(model, included)
    return _builder.build_single(node, included=included.nodes())


def marshal_one_without_included(model: Any) -> OnePayload:
    """Return a payload for one object with shallow linkage and no ``included``."""
    node = JSONAPISerializer().to_node(model, IncludedSet())
    return _builder.build_single(node)


def marshal_one_embedded(model: Any) -> OnePayload:
    """Return a payload for one object with related objects nested in full.

    Mostly useful for building request bodies in tests, where clients send
    embedded rather than sideloaded relationships.
    """
    node = JSONAPISerializer(sideload=False).to_node(model)
    return _builder.build_single(node)


def marshal_many(models: Sequence[Any], meta: Any = None) -> ManyPayload:
    """Return a payload for a homogeneous sequence of objects."""
    items = as_model_sequence(models)
    included = IncludedSet()
    nodes = JSONAPISerializer().to_many(items, included)
    return _builder.build_collection(
        nodes, included=included.nodes(), meta=encode_meta(meta)
    )


def as_model_sequence(models: Any) -> list[Any]:
    """Return ``models`` as a list, checking it is a homogeneous sequence."""
    if isinstance(models, (str, bytes, Mapping)) or not isinstance(models, Sequence):
        raise ExpectedSequence(
            f"models should be a sequence of annotated objects, got {type(models).__name__}"
        )
    items = list(models)
    if items:
        model_type = type(items[0])
        for item in items:
            if item is None or type(item) is not model_type:
                raise ExpectedSequence(
                    f"models should all be {model_type.__name__} instances, "
                    f"got {type(item).__name__}"
                )
    return items


def dumps(payload: OnePayload | ManyPayload | Mapping[str, Any]) -> str:
    """Encode a payload as JSON text."""
    document = payload if isinstance(payload, Mapping) else payload.as_document()
    return json.dumps(
        document,
        default=to_jsonable_python,
        ensure_ascii=config.JSON_ENSURE_ASCII,
    )


def _write(writer: TextIO, payload: OnePayload | ManyPayload) -> None:
    writer.write(dumps(payload))
    writer.write("\n")


def marshal_one_payload(model: Any, writer: TextIO) -> None:
    """Write a document for one object with related objects sideloaded."""
    _write(writer, marshal_one(model))


def marshal_one_payload_without_included(model: Any, writer: TextIO) -> None:
    """Write a document for one object without the ``included`` array."""
    _write(writer, marshal_one_without_included(model))


def marshal_one_payload_embedded(model: Any, writer: TextIO) -> None:
    """Write a document for one object with related objects nested in full."""
    _write(writer, marshal_one_embedded(model))


def marshal_many_payload(models: Sequence[Any], writer: TextIO) -> None:
    """Write a document for a sequence of objects."""
    _write(writer, marshal_many(models))


def marshal_many_payload_with_meta(
    models: Sequence[Any], meta: Any, writer: TextIO
) -> None:
    """Write a document for a sequence of objects with a top-level meta member."""
    _write(writer, marshal_many(models, meta))
