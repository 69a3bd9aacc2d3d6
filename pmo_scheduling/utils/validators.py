"""Record validation utilities."""
from typing import Any, List, Dict
import logging

logger = logging.getLogger(__name__)


def validate_required_fields(
    data: List[Dict[str, Any]],
    required_fields: set[str],
) -> tuple[bool, List[str]]:
    """
    Validate that all records contain required fields.

    Args:
        data: List of dictionaries to validate
        required_fields: Set of required field names

    Returns:
        Tuple of (is_valid, list_of_invalid_records)
    """
    invalid_records = []

    for idx, record in enumerate(data):
        missing_fields = required_fields - set(record.keys())
        if missing_fields:
            invalid_records.append(
                f'Record {idx}: Missing fields {sorted(missing_fields)}'
            )

    return len(invalid_records) == 0, invalid_records


def validate_no_duplicates(
    data: List[Dict[str, Any]],
    key_field: str,
) -> tuple[bool, List[Any]]:
    """
    Validate that there are no duplicate key values.

    Args:
        data: List of dictionaries to validate
        key_field: Field to check for duplicates

    Returns:
        Tuple of (is_valid, list_of_duplicate_values) with duplicates in
        first-seen order
    """
    seen = set()
    duplicates = []

    for record in data:
        key = record.get(key_field)
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)

    return len(duplicates) == 0, duplicates
