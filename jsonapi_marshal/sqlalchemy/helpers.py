"""Derive JSON:API field specifications from SQLAlchemy mapped classes.

Mapped classes need no descriptors: the single primary key column becomes the
resource id, every other column that is not a foreign key becomes an
attribute, and every relationship becomes a relationship. The resource type
defaults to ``__tablename__``.

Relationships are read from already loaded state only, so marshaling never
triggers a lazy load. Load what the document needs beforehand (for example
with ``selectinload``).
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from sqlalchemy import DateTime
from sqlalchemy.inspection import inspect
from sqlalchemy.orm import Mapper, configure_mappers
from sqlalchemy.orm.attributes import NO_VALUE

from jsonapi_marshal.exceptions import BadFieldSpec
from jsonapi_marshal.fields import FieldSpec, Role, register_model
from jsonapi_marshal.timestamps import CALENDAR


def is_mapped_class(cls: type) -> bool:
    """Return True if ``cls`` is mapped by SQLAlchemy."""
    return isinstance(inspect(cls, raiseerr=False), Mapper)


def _loaded_relationship(key: str) -> Callable[[Any], Any]:
    def accessor(instance: Any) -> Any:
        value = inspect(instance).attrs[key].loaded_value
        if value is NO_VALUE:
            return None
        return value

    return accessor


def sqlalchemy_field_specs(
    model: type,
    *,
    type_: str | None = None,
    exclude: Iterable[str] = (),
    omit_empty: bool = False,
) -> list[FieldSpec]:
    """Return field specifications for a mapped class."""
    configure_mappers()
    mapper = inspect(model)
    excluded = set(exclude)

    if len(mapper.primary_key) != 1:
        raise BadFieldSpec(
            f"{model.__qualname__} needs exactly one primary key column to be a resource"
        )
    primary_key = mapper.get_property_by_column(mapper.primary_key[0]).key
    resource_type = type_ or getattr(model, "__tablename__", model.__name__.lower())

    specs = [FieldSpec(Role.PRIMARY, wire_name=resource_type, name=primary_key)]
    for prop in mapper.column_attrs:
        column = prop.columns[0]
        if prop.key == primary_key or prop.key in excluded or column.foreign_keys:
            continue
        specs.append(
            FieldSpec(
                Role.ATTRIBUTE,
                wire_name=prop.key,
                omit_empty=omit_empty,
                name=prop.key,
                codec=CALENDAR if isinstance(column.type, DateTime) else None,
                nullable=bool(column.nullable),
            )
        )
    for relationship in mapper.relationships:
        if relationship.key in excluded:
            continue
        specs.append(
            FieldSpec(
                Role.RELATIONSHIP,
                wire_name=relationship.key,
                name=relationship.key,
                accessor=_loaded_relationship(relationship.key),
                many=relationship.uselist,
            )
        )
    return specs


def register_sqlalchemy_model(
    model: type,
    *,
    type_: str | None = None,
    exclude: Iterable[str] = (),
    omit_empty: bool = False,
) -> type:
    """Register a mapped class under a custom type or with excluded fields."""
    return register_model(
        model,
        sqlalchemy_field_specs(model, type_=type_, exclude=exclude, omit_empty=omit_empty),
    )
