from .descriptor import FieldDescription, build_schema_descriptor

__all__ = ["FieldDescription", "build_schema_descriptor"]
