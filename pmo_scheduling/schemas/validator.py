"""
Schema validation utilities for output DataFrames.

Checks that frames handed to downstream consumers keep their column
contract:
  - Missing columns or incompatible column types are errors
  - Extra columns are allowed unless strict mode is on
"""

import types
from datetime import date, datetime
from typing import Type, List, Optional, Union, get_args, get_origin
import pandas as pd
from pydantic import BaseModel


class SchemaValidationError(Exception):
    """Raised when schema validation fails."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


def pandas_dtype_to_python_type(dtype) -> str:
    """Convert pandas dtype to a simplified type string."""
    dtype_str = str(dtype)

    if dtype_str.startswith('int') or dtype_str.startswith('Int'):
        return 'int'
    elif dtype_str.startswith('float'):
        return 'float'
    elif dtype_str == 'object':
        return 'str'
    elif dtype_str.startswith('datetime'):
        return 'datetime'
    elif dtype_str in ('bool', 'boolean'):
        return 'bool'
    else:
        return dtype_str


def pydantic_type_to_string(field_type) -> str:
    """Convert a Pydantic field annotation to a simplified type string."""
    # Unwrap Optional[X] / X | None
    if get_origin(field_type) in (Union, types.UnionType):
        args = [a for a in get_args(field_type) if a is not type(None)]
        if len(args) == 1:
            field_type = args[0]

    # bool before int: bool is an int subclass
    if field_type is bool:
        return 'bool'
    if field_type is int:
        return 'int'
    if field_type is float:
        return 'float'
    if field_type is str:
        return 'str'
    if field_type in (date, datetime):
        return 'datetime'
    return str(field_type)


def types_compatible(pandas_type: str, pydantic_type: str) -> bool:
    """
    Check if pandas type is compatible with pydantic type.

    Lenient where pandas inference is: empty frames come back as object
    columns, and nullable integers come back as float.
    """
    if pandas_type == pydantic_type:
        return True

    # float in pandas can represent nullable int
    if pandas_type == 'float' and pydantic_type == 'int':
        return True

    # Any numeric to numeric is generally ok
    if pandas_type in ('int', 'float') and pydantic_type in ('int', 'float'):
        return True

    # object dtype covers empty columns and date objects
    if pandas_type == 'str' and pydantic_type in ('int', 'float', 'bool', 'datetime'):
        return True

    return False


def validate_dataframe(
    df: pd.DataFrame,
    schema: Type[BaseModel],
    strict: bool = False,
) -> List[str]:
    """
    Validate a DataFrame against a Pydantic schema.

    Args:
        df: DataFrame to validate
        schema: Pydantic model class defining expected columns
        strict: If True, fail on extra columns not in schema

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    schema_fields = schema.model_fields
    expected_columns = {info.alias or name: name for name, info in schema_fields.items()}
    actual_columns = set(df.columns)

    missing = set(expected_columns) - actual_columns
    if missing:
        errors.append(f"Missing required columns: {sorted(missing)}")

    extra = actual_columns - set(expected_columns)
    if extra and strict:
        errors.append(f"Unexpected columns (strict mode): {sorted(extra)}")

    for col in sorted(set(expected_columns) & actual_columns):
        pandas_type = pandas_dtype_to_python_type(df[col].dtype)
        field_info = schema_fields[expected_columns[col]]
        pydantic_type = pydantic_type_to_string(field_info.annotation)
        if not types_compatible(pandas_type, pydantic_type):
            errors.append(f"Column '{col}': expected {pydantic_type}, got {pandas_type}")

    return errors


def ensure_valid_dataframe(
    df: pd.DataFrame,
    schema: Type[BaseModel],
    strict: bool = False,
) -> pd.DataFrame:
    """
    Return ``df`` unchanged if it matches ``schema``.

    Raises:
        SchemaValidationError: listing every problem found
    """
    errors = validate_dataframe(df, schema, strict=strict)
    if errors:
        raise SchemaValidationError(
            f"DataFrame does not match {schema.__name__}: {'; '.join(errors)}",
            errors=errors,
        )
    return df
