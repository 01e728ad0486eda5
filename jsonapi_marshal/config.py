"""Configuration constants for JSON:API marshaling."""

import os

# Key under which field descriptors are stored in dataclass metadata
# and pydantic ``json_schema_extra``.
TAG_KEY = "jsonapi"
TAG_DELIMITER = ","

ANNOTATION_PRIMARY = "primary"
ANNOTATION_CLIENT_ID = "client-id"
ANNOTATION_ATTRIBUTE = "attr"
ANNOTATION_RELATION = "relation"
OMIT_EMPTY = "omitempty"

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"

JSON_ENSURE_ASCII = os.getenv("JSONAPI_MARSHAL_ENSURE_ASCII", "false").lower() == "true"
