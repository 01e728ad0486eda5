"""JSON:API document assembly."""

from typing import Any, Iterable, Mapping

from jsonapi_marshal.schemas.resource import ManyPayload, OnePayload, ResourceNode


class JSONAPIDocumentBuilder:
    """Build JSON:API v1.1 payloads from resource nodes."""

    def build_single(
        self,
        resource: ResourceNode,
        *,
        included: Iterable[ResourceNode] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> OnePayload:
        """Return a payload for a single resource object."""
        return OnePayload(
            data=resource,
            included=list(included or ()),
            meta=dict(meta) if meta is not None else None,
        )

    def build_collection(
        self,
        resources: Iterable[ResourceNode] | None,
        *,
        included: Iterable[ResourceNode] | None = None,
        meta: Mapping[str, Any] | None = None,
    ) -> ManyPayload:
        """Return a payload for a collection of resources; data is never absent."""
        return ManyPayload(
            data=list(resources or ()),
            included=list(included or ()),
            meta=dict(meta) if meta is not None else None,
        )
