"""Serialize annotated object graphs into JSON:API resource nodes."""

from __future__ import annotations

import logging
from collections.abc import Set as AbstractSet
from collections.abc import Sequence, Sized
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Iterator

from jsonapi_marshal.exceptions import BadPrimaryKeyType
from jsonapi_marshal.fields import FieldSpec, Role, get_model_specs
from jsonapi_marshal.schemas.resource import (
    RelationshipMany,
    RelationshipOne,
    ResourceNode,
)
from jsonapi_marshal.timestamps import CALENDAR, is_zero_time

logger = logging.getLogger(__name__)

# Sentinel returned by encode_attribute for values left out of the document.
OMITTED = object()


class IncludedSet:
    """Sideloaded resources keyed by ``(type, id)``.

    The first node added for a key is kept; later nodes with the same key are
    dropped. One instance is shared by every visit of a single top-level
    marshal call and must not be reused across calls.
    """

    def __init__(self) -> None:
        self._nodes: dict[tuple[str, str], ResourceNode] = {}

    def add(self, node: ResourceNode) -> bool:
        """Add a node unless its key is already present; return True if added."""
        key = (node.type, node.id)
        if key in self._nodes:
            logger.debug("Coalesced duplicate included resource %s:%s", *key)
            return False
        self._nodes[key] = node
        logger.debug("Sideloaded resource %s:%s", *key)
        return True

    def nodes(self) -> list[ResourceNode]:
        """Return the included nodes as a list."""
        return list(self._nodes.values())

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __iter__(self) -> Iterator[ResourceNode]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)


def is_empty_value(value: Any) -> bool:
    """Return True if value is the zero value of its type."""
    if value is None:
        return True
    if isinstance(value, (bool, int, float, complex, Decimal)):
        return not value
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def encode_attribute(spec: FieldSpec, value: Any) -> Any:
    """Return the wire value of an attribute, or ``OMITTED``.

    Timestamps are written with the field's codec. A non-nullable timestamp
    that is unset or zero is always left out; a nullable one is left out only
    with ``omitempty`` (otherwise unset becomes null and zero is encoded).
    """
    codec = spec.codec
    if codec is None and isinstance(value, datetime):
        codec = CALENDAR

    if codec is not None:
        if value is None:
            if spec.nullable and not spec.omit_empty:
                return None
            return OMITTED
        if is_zero_time(value):
            if spec.nullable and not spec.omit_empty:
                return codec.encode(value)
            return OMITTED
        return codec.encode(value)

    if spec.omit_empty and is_empty_value(value):
        return OMITTED
    if spec.adapter is not None and value is not None:
        return spec.adapter.dump_python(value, mode="json")
    return value


def _is_collection(value: Any) -> bool:
    if isinstance(value, (str, bytes)):
        return False
    return isinstance(value, (Sequence, AbstractSet))


class JSONAPISerializer:
    """Serialize annotated objects into JSON:API resource nodes.

    With ``sideload`` enabled, every related resource is added to the
    :class:`IncludedSet` passed in and relationships carry shallow
    ``(type, id)`` references. Without it, relationships embed the full
    related node and no included set is used.

    Reference cycles in the object graph are not detected; a cyclic graph
    recurses until Python raises ``RecursionError``.
    """

    def __init__(self, *, sideload: bool = True) -> None:
        self.sideload = sideload

    def to_node(self, instance: Any, included: IncludedSet | None = None) -> ResourceNode:
        """Visit one object and return its resource node.

        When sideloading without an ``included`` set, a private set is used
        and discarded: relationships still carry shallow references, but the
        related nodes are not returned anywhere. Pass a set to collect them.
        """
        if self.sideload and included is None:
            included = IncludedSet()

        resource_type = ""
        resource_id = ""
        client_id = None
        attributes: dict[str, Any] = {}
        relationships: dict[str, RelationshipOne | RelationshipMany] = {}

        for spec in get_model_specs(type(instance)):
            value = spec.get_value(instance)
            if spec.role is Role.PRIMARY:
                resource_type = spec.wire_name
                resource_id = self.get_id(value)
            elif spec.role is Role.CLIENT_ID:
                client_id = self.get_client_id(value)
            elif spec.role is Role.ATTRIBUTE:
                encoded = encode_attribute(spec, value)
                if encoded is not OMITTED:
                    attributes[spec.wire_name] = encoded
            else:
                linkage = self.get_relationship(spec, value, included)
                if linkage is not None:
                    relationships[spec.wire_name] = linkage

        return ResourceNode(
            type=resource_type,
            id=resource_id,
            client_id=client_id,
            attributes=attributes or None,
            relationships=relationships or None,
        )

    def to_many(
        self, instances: Iterable[Any], included: IncludedSet | None = None
    ) -> list[ResourceNode]:
        """Visit a collection of objects, sharing one included set.

        As with :meth:`to_node`, related nodes are discarded unless
        ``included`` is given.
        """
        if self.sideload and included is None:
            included = IncludedSet()
        return [self.to_node(instance, included) for instance in instances]

    def get_id(self, value: Any) -> str:
        """Return the resource id as a canonical string."""
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise BadPrimaryKeyType(
                f"id should be either a string or an integer, got {type(value).__name__}"
            )
        if isinstance(value, int):
            return str(int(value))
        return value

    def get_client_id(self, value: Any) -> str | None:
        """Return the client-generated id, or None when it is unset."""
        if not value:
            return None
        return str(value)

    def get_relationship(
        self, spec: FieldSpec, value: Any, included: IncludedSet | None
    ) -> RelationshipOne | RelationshipMany | None:
        """Return the linkage for a relationship field, or None if it is empty."""
        if value is None:
            return None
        many = spec.many if spec.many is not None else _is_collection(value)
        if many:
            targets = list(value)
            if not targets:
                return None
            return RelationshipMany(
                data=[self._link(self.to_node(target, included), included) for target in targets]
            )
        return RelationshipOne(data=self._link(self.to_node(value, included), included))

    def _link(self, node: ResourceNode, included: IncludedSet | None) -> ResourceNode:
        if not self.sideload:
            return node
        included.add(node)
        return node.shallow()
