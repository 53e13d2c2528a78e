"""Structural comparison of live and desired resource state."""

from .comparator import compare
from .json_value import ArrayMode, contains, is_json_object, parse

__all__ = ["ArrayMode", "compare", "contains", "is_json_object", "parse"]
