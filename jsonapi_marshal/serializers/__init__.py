"""Serializers turning annotated objects into JSON:API nodes."""

from .base import IncludedSet, JSONAPISerializer, encode_attribute
from .meta import encode_meta

__all__ = ["IncludedSet", "JSONAPISerializer", "encode_attribute", "encode_meta"]
