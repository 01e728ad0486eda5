"""Pydantic models for the JSON:API documents produced by the marshaler."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ResourceNode(BaseModel):
    """Resource object: type, id, attributes and relationships.

    A node with only ``type`` and ``id`` doubles as a resource identifier
    (a shallow reference to a resource described elsewhere).
    """

    model_config = ConfigDict(frozen=True)

    type: str
    id: str = ""
    client_id: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None
    relationships: Optional[Dict[str, Union[RelationshipOne, RelationshipMany]]] = None

    def shallow(self) -> ResourceNode:
        """Return a copy carrying only type and id."""
        return ResourceNode(type=self.type, id=self.id)

    def as_document(self) -> dict[str, Any]:
        """Return the wire form of this resource object."""
        resource: dict[str, Any] = {"type": self.type}
        if self.id:
            resource["id"] = self.id
        if self.client_id:
            resource["client-id"] = self.client_id
        if self.attributes:
            resource["attributes"] = dict(self.attributes)
        if self.relationships:
            resource["relationships"] = {
                name: linkage.as_document() for name, linkage in self.relationships.items()
            }
        return resource


class RelationshipOne(BaseModel):
    """To-one relationship linkage."""

    model_config = ConfigDict(frozen=True)

    data: ResourceNode

    def as_document(self) -> dict[str, Any]:
        return {"data": self.data.as_document()}


class RelationshipMany(BaseModel):
    """To-many relationship linkage, in declaration order of the targets."""

    model_config = ConfigDict(frozen=True)

    data: List[ResourceNode]

    def as_document(self) -> dict[str, Any]:
        return {"data": [node.as_document() for node in self.data]}


class OnePayload(BaseModel):
    """Top-level document for a single primary resource."""

    data: ResourceNode
    included: List[ResourceNode] = Field(default_factory=list)
    meta: Optional[Dict[str, Any]] = None

    def as_document(self) -> dict[str, Any]:
        """Return the wire form of this document."""
        document: dict[str, Any] = {"data": self.data.as_document()}
        if self.included:
            document["included"] = [node.as_document() for node in self.included]
        if self.meta is not None:
            document["meta"] = dict(self.meta)
        return document


class ManyPayload(BaseModel):
    """Top-level document for a collection of primary resources."""

    data: List[ResourceNode] = Field(default_factory=list)
    included: List[ResourceNode] = Field(default_factory=list)
    meta: Optional[Dict[str, Any]] = None

    def as_document(self) -> dict[str, Any]:
        """Return the wire form of this document; ``data`` is always a list."""
        document: dict[str, Any] = {"data": [node.as_document() for node in self.data]}
        if self.included:
            document["included"] = [node.as_document() for node in self.included]
        if self.meta is not None:
            document["meta"] = dict(self.meta)
        return document


ResourceNode.model_rebuild()
RelationshipOne.model_rebuild()
RelationshipMany.model_rebuild()
OnePayload.model_rebuild()
ManyPayload.model_rebuild()
