"""
Contract Validation Module

JSON Schema контракты для Integer / Rational и снапшотов кучи.
"""

from .validators import (
    CONTRACTS,
    SCHEMA_DIR_ENV,
    ContractValidator,
    HeapSnapshotValidator,
    IntegerValueValidator,
    RationalValueValidator,
    SchemaLoader,
    default_schema_dir,
    validate_heap_snapshot,
    validate_integer_value,
    validate_rational_value,
)

__all__ = [
    # Constants
    "CONTRACTS",
    "SCHEMA_DIR_ENV",
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "IntegerValueValidator",
    "RationalValueValidator",
    "HeapSnapshotValidator",
    # Functions
    "default_schema_dir",
    "validate_integer_value",
    "validate_rational_value",
    "validate_heap_snapshot",
]
