"""Exceptions raised while marshaling objects into JSON:API documents."""


class MarshalError(Exception):
    """Base class for structural errors found while walking an object graph."""

    code = "marshal_error"
    title = "Marshal Error"


class BadFieldSpec(MarshalError, ValueError):
    """A field descriptor does not follow the JSON:API tag grammar."""

    code = "bad_field_spec"
    title = "Bad jsonapi field descriptor"


class BadPrimaryKeyType(MarshalError, TypeError):
    """The primary field holds something other than a string or an integer."""

    code = "bad_primary_key_type"
    title = "id should be either a string or an integer"


class ExpectedSequence(MarshalError, TypeError):
    """A collection operation received something other than a homogeneous sequence."""

    code = "expected_sequence"
    title = "models should be a sequence of annotated objects"


class UnsupportedModel(MarshalError, TypeError):
    """The object's class declares no JSON:API fields at all."""

    code = "unsupported_model"
    title = "model does not declare any jsonapi fields"
