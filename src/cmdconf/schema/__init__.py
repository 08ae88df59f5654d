"""オプションスキーマ。"""

from cmdconf.schema._loader import load_builtin_schema, load_schema
from cmdconf.schema._schema import OptionKey, Schema, SchemaError

__all__ = [
    "OptionKey",
    "Schema",
    "SchemaError",
    "load_builtin_schema",
    "load_schema",
]
