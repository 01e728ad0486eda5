"""Marshal annotated Python objects into JSON:API v1.1 documents."""

from .core.document import JSONAPIDocumentBuilder
from .core.errors import JSONAPIErrorBuilder
from .exceptions import (
    BadFieldSpec,
    BadPrimaryKeyType,
    ExpectedSequence,
    MarshalError,
    UnsupportedModel,
)
from .fields import FieldSpec, Role, attr, client_id, meta, primary, register_model, relation
from .marshal import (
    marshal_many,
    marshal_many_payload,
    marshal_many_payload_with_meta,
    marshal_one,
    marshal_one_embedded,
    marshal_one_payload,
    marshal_one_payload_embedded,
    marshal_one_payload_without_included,
    marshal_one_without_included,
)
from .serializers.base import IncludedSet, JSONAPISerializer
from .timestamps import ISO8601Datetime, UnixMilli

__all__ = [
    "BadFieldSpec",
    "BadPrimaryKeyType",
    "ExpectedSequence",
    "FieldSpec",
    "ISO8601Datetime",
    "IncludedSet",
    "JSONAPIDocumentBuilder",
    "JSONAPIErrorBuilder",
    "JSONAPISerializer",
    "MarshalError",
    "Role",
    "UnixMilli",
    "UnsupportedModel",
    "attr",
    "client_id",
    "marshal_many",
    "marshal_many_payload",
    "marshal_many_payload_with_meta",
    "marshal_one",
    "marshal_one_embedded",
    "marshal_one_payload",
    "marshal_one_payload_embedded",
    "marshal_one_payload_without_included",
    "marshal_one_without_included",
    "meta",
    "primary",
    "register_model",
    "relation",
]
