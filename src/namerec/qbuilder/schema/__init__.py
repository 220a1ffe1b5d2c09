"""Schema introspection package."""

from namerec.qbuilder.schema.cache import ColumnCache
from namerec.qbuilder.schema.introspector import SchemaIntrospector

__all__ = [
    'ColumnCache',
    'SchemaIntrospector',
]
