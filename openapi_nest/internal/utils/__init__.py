"""Утилиты для генератора"""

from .naming import (
    capitalize,
    class_name_from_resource,
    enum_key,
    enum_name,
    extract_resource_name,
    header_to_identifier,
    operation_name_from_path,
)

__all__ = [
    "capitalize",
    "class_name_from_resource",
    "enum_key",
    "enum_name",
    "extract_resource_name",
    "header_to_identifier",
    "operation_name_from_path",
]
