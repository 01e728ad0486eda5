"""SQLAlchemy integration for JSON:API marshaling."""

from .helpers import is_mapped_class, register_sqlalchemy_model, sqlalchemy_field_specs

__all__ = ["is_mapped_class", "register_sqlalchemy_model", "sqlalchemy_field_specs"]
