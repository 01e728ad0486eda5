"""Pydantic schemas for JSON:API."""

from .resource import (
    ManyPayload,
    OnePayload,
    RelationshipMany,
    RelationshipOne,
    ResourceNode,
)

__all__ = [
    "ManyPayload",
    "OnePayload",
    "RelationshipMany",
    "RelationshipOne",
    "ResourceNode",
]
