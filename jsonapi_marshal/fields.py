"""Field descriptors and per-class field specifications.

A model class marks the fields that take part in a JSON:API document with a
descriptor string stored under the ``jsonapi`` key of the field's metadata::

    @dataclass
    class Person:
        id: str = field(metadata={"jsonapi": "primary,people"})
        name: str = field(metadata={"jsonapi": "attr,name,omitempty"})
        pet: Animal | None = field(default=None, metadata={"jsonapi": "relation,pet"})

The :func:`primary`, :func:`client_id`, :func:`attr`, :func:`relation` and
:func:`meta` helpers build such fields for dataclasses, or pydantic
``Field`` objects with ``pydantic=True``. Descriptors are parsed once per
class; the result is an ordered tuple of :class:`FieldSpec`.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import logging
import types
from datetime import datetime
from enum import Enum
from functools import lru_cache
from typing import (
    Annotated,
    Any,
    Callable,
    ForwardRef,
    Iterable,
    TypeVar,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from pydantic import BaseModel, Field, TypeAdapter

from jsonapi_marshal import config
from jsonapi_marshal.exceptions import BadFieldSpec, UnsupportedModel
from jsonapi_marshal.timestamps import CALENDAR, TimestampCodec

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Role a declared field plays in a resource object."""

    PRIMARY = config.ANNOTATION_PRIMARY
    CLIENT_ID = config.ANNOTATION_CLIENT_ID
    ATTRIBUTE = config.ANNOTATION_ATTRIBUTE
    RELATIONSHIP = config.ANNOTATION_RELATION


@dataclasses.dataclass(frozen=True)
class FieldSpec:
    """Resolved description of one declared field.

    ``wire_name`` is the resource type for a primary field. ``codec``,
    ``nullable``, ``many`` and ``adapter`` come from the declared type hint;
    ``many`` is None when it has to be decided from the runtime value.
    """

    role: Role
    wire_name: str = ""
    omit_empty: bool = False
    name: str = ""
    accessor: Callable[[Any], Any] | None = None
    codec: TimestampCodec | None = None
    nullable: bool = False
    many: bool | None = None
    adapter: TypeAdapter | None = None

    def get_value(self, instance: Any) -> Any:
        """Read this field's value from an instance."""
        if self.accessor is not None:
            return self.accessor(instance)
        return getattr(instance, self.name)


def _parse_omit_empty(tag: str, options: list[str]) -> bool:
    if not options:
        return False
    if options != [config.OMIT_EMPTY]:
        raise BadFieldSpec(f"unknown jsonapi option in {tag!r}")
    return True


def parse_tag(tag: str) -> FieldSpec:
    """Parse a model field descriptor such as ``"attr,title,omitempty"``."""
    args = tag.split(config.TAG_DELIMITER) if tag else []
    if not args or not args[0]:
        raise BadFieldSpec(f"empty jsonapi descriptor {tag!r}")

    annotation = args[0]
    if annotation == config.ANNOTATION_CLIENT_ID:
        if len(args) != 1:
            raise BadFieldSpec(f"client-id descriptor takes no arguments: {tag!r}")
        return FieldSpec(Role.CLIENT_ID)
    if annotation == config.ANNOTATION_PRIMARY:
        if len(args) != 2 or not args[1]:
            raise BadFieldSpec(f"primary descriptor needs exactly a type: {tag!r}")
        return FieldSpec(Role.PRIMARY, wire_name=args[1])
    if annotation in (config.ANNOTATION_ATTRIBUTE, config.ANNOTATION_RELATION):
        if len(args) < 2 or len(args) > 3 or not args[1]:
            raise BadFieldSpec(f"{annotation} descriptor needs a name: {tag!r}")
        return FieldSpec(
            Role(annotation),
            wire_name=args[1],
            omit_empty=_parse_omit_empty(tag, args[2:]),
        )
    raise BadFieldSpec(f"unknown jsonapi annotation {annotation!r} in {tag!r}")


def parse_meta_tag(tag: str) -> FieldSpec:
    """Parse a meta field descriptor: ``"<name>[,omitempty]"``."""
    args = tag.split(config.TAG_DELIMITER) if tag else []
    if not args or not args[0] or len(args) > 2:
        raise BadFieldSpec(f"bad jsonapi meta descriptor {tag!r}")
    return FieldSpec(
        Role.ATTRIBUTE,
        wire_name=args[0],
        omit_empty=_parse_omit_empty(tag, args[1:]),
    )


def _declare(tag: str, *, pydantic: bool = False, **kwargs: Any) -> Any:
    if pydantic:
        return Field(json_schema_extra={config.TAG_KEY: tag}, **kwargs)
    return dataclasses.field(metadata={config.TAG_KEY: tag}, **kwargs)


def _with_options(tag: str, omitempty: bool) -> str:
    if omitempty:
        return config.TAG_DELIMITER.join((tag, config.OMIT_EMPTY))
    return tag


def primary(type_: str, **kwargs: Any) -> Any:
    """Declare the field holding the resource id of type ``type_``."""
    return _declare(config.TAG_DELIMITER.join((config.ANNOTATION_PRIMARY, type_)), **kwargs)


def client_id(**kwargs: Any) -> Any:
    """Declare the field holding a client-generated id."""
    return _declare(config.ANNOTATION_CLIENT_ID, **kwargs)


def attr(name: str, *, omitempty: bool = False, **kwargs: Any) -> Any:
    """Declare an attribute field."""
    tag = config.TAG_DELIMITER.join((config.ANNOTATION_ATTRIBUTE, name))
    return _declare(_with_options(tag, omitempty), **kwargs)


def relation(name: str, *, omitempty: bool = False, **kwargs: Any) -> Any:
    """Declare a relationship field (a single object or a collection)."""
    tag = config.TAG_DELIMITER.join((config.ANNOTATION_RELATION, name))
    return _declare(_with_options(tag, omitempty), **kwargs)


def meta(name: str, *, omitempty: bool = False, **kwargs: Any) -> Any:
    """Declare a field of a meta object."""
    return _declare(_with_options(name, omitempty), **kwargs)


_registry: dict[type, tuple[FieldSpec, ...]] = {}


def register_model(cls: type, specs: Iterable[FieldSpec]) -> type:
    """Register explicit field specifications for ``cls`` and its subclasses."""
    _registry[cls] = tuple(specs)
    get_model_specs.cache_clear()
    return cls


def _registered(cls: type) -> tuple[FieldSpec, ...] | None:
    for base in cls.__mro__:
        if base in _registry:
            return _registry[base]
    return None


def _declared_tags(cls: type) -> list[tuple[str, str | None]] | None:
    if dataclasses.is_dataclass(cls):
        return [
            (field.name, field.metadata.get(config.TAG_KEY))
            for field in dataclasses.fields(cls)
        ]
    if issubclass(cls, BaseModel):
        tags = []
        for name, info in cls.model_fields.items():
            extra = info.json_schema_extra
            tags.append((name, extra.get(config.TAG_KEY) if isinstance(extra, dict) else None))
        return tags
    return None


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return get_type_hints(cls, include_extras=True)
    except (NameError, TypeError) as exc:
        logger.debug("Falling back to runtime types for %s: %s", cls.__qualname__, exc)
        return {}


def _codec_of(metadata: Iterable[Any]) -> TimestampCodec | None:
    for item in metadata:
        if isinstance(item, TimestampCodec):
            return item
    return None


def _unwrap(hint: Any) -> tuple[TimestampCodec | None, bool, Any]:
    """Return the timestamp codec, nullability and inner type of a hint."""
    codec = None
    nullable = False
    if get_origin(hint) is Annotated:
        codec = _codec_of(hint.__metadata__)
        hint = get_args(hint)[0]
    if get_origin(hint) in (Union, types.UnionType):
        members = [arg for arg in get_args(hint) if arg is not type(None)]
        nullable = len(members) < len(get_args(hint))
        if len(members) == 1:
            hint = members[0]
            if get_origin(hint) is Annotated:
                codec = codec or _codec_of(hint.__metadata__)
                hint = get_args(hint)[0]
    if codec is None and get_origin(hint) is None and isinstance(hint, type):
        if issubclass(hint, datetime):
            codec = CALENDAR
    return codec, nullable, hint


def _nests_codec(hint: Any) -> bool:
    if get_origin(hint) is Annotated:
        if _codec_of(hint.__metadata__) is not None:
            return True
        return _nests_codec(get_args(hint)[0])
    return any(_nests_codec(arg) for arg in get_args(hint))


def _is_collection_type(hint: Any) -> bool | None:
    if hint is Any or isinstance(hint, (str, ForwardRef, TypeVar)):
        return None
    origin = get_origin(hint) or hint
    if not isinstance(origin, type):
        return None
    if issubclass(origin, (str, bytes, collections.abc.Mapping)):
        return False
    if issubclass(origin, (collections.abc.Sequence, collections.abc.Set)):
        return True
    # Collection, Iterable and friends: decided from the runtime value.
    if issubclass(origin, collections.abc.Iterable):
        return None
    return False


def _resolve(spec: FieldSpec, name: str, hint: Any) -> FieldSpec:
    spec = dataclasses.replace(spec, name=name)
    if hint is None:
        return spec
    codec, nullable, inner = _unwrap(hint)
    if spec.role is Role.ATTRIBUTE:
        if codec is not None:
            return dataclasses.replace(spec, codec=codec, nullable=nullable)
        if _nests_codec(hint):
            return dataclasses.replace(spec, nullable=nullable, adapter=TypeAdapter(hint))
        return dataclasses.replace(spec, nullable=nullable)
    if spec.role is Role.RELATIONSHIP:
        return dataclasses.replace(spec, nullable=nullable, many=_is_collection_type(inner))
    return spec


def _build_specs(
    cls: type, parse: Callable[[str], FieldSpec]
) -> tuple[FieldSpec, ...] | None:
    declared = _declared_tags(cls)
    if declared is None:
        return None
    hints = _type_hints(cls)
    specs = []
    for name, tag in declared:
        if not tag:
            continue
        specs.append(_resolve(parse(tag), name, hints.get(name)))
    logger.debug("Resolved %d jsonapi fields for %s", len(specs), cls.__qualname__)
    return tuple(specs)


@lru_cache(maxsize=None)
def get_model_specs(cls: type) -> tuple[FieldSpec, ...]:
    """Return the field specifications of a model class, in declaration order."""
    registered = _registered(cls)
    if registered is not None:
        return registered
    specs = _build_specs(cls, parse_tag)
    if specs:
        return specs

    from jsonapi_marshal.sqlalchemy.helpers import is_mapped_class, sqlalchemy_field_specs

    # Mapped classes without descriptors, including MappedAsDataclass models.
    if is_mapped_class(cls):
        return tuple(sqlalchemy_field_specs(cls))
    if specs is not None:
        return specs
    raise UnsupportedModel(f"{cls.__qualname__} does not declare any jsonapi fields")


@lru_cache(maxsize=None)
def get_meta_specs(cls: type) -> tuple[FieldSpec, ...]:
    """Return the field specifications of a meta object class."""
    specs = _build_specs(cls, parse_meta_tag)
    if specs is None:
        raise UnsupportedModel(f"{cls.__qualname__} does not declare any jsonapi meta fields")
    return specs
