"""
Contract Validation Module

JSON Schema контракт graft-директивы манифеста.
"""

from .validators import GRAFT_SCHEMA, SCHEMA_DIR, GraftValidator, load_schema, validate_graft

__all__ = [
    "GRAFT_SCHEMA",
    "SCHEMA_DIR",
    "GraftValidator",
    "load_schema",
    "validate_graft",
]
