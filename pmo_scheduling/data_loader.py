"""
Data Loader for Schedulable Items.

Loads task or project records from store dicts, DataFrames, or CSV exports
and validates them into SchedulableItem objects for CPM analysis.
"""

import logging
from pathlib import Path
from typing import Any, Iterable, Union

import pandas as pd

from .cpm.models import SchedulableItem
from .schemas.items import SchedulableItemRecord
from .utils.validators import validate_no_duplicates, validate_required_fields

logger = logging.getLogger(__name__)


def load_items(records: Iterable[dict[str, Any]]) -> list[SchedulableItem]:
    """
    Validate raw records into SchedulableItems.

    Args:
        records: Dicts with camelCase (store) or snake_case (CSV) keys

    Returns:
        Items in input order. Duplicate ids are kept and logged; the
        dependency graph keeps the first occurrence.

    Raises:
        ValueError: if a record has no id
        pydantic.ValidationError: if a field cannot be parsed
    """
    records = list(records)

    ok, invalid = validate_required_fields(records, {'id'})
    if not ok:
        raise ValueError(f"Records missing an id: {invalid[:5]}")

    ok, duplicates = validate_no_duplicates(records, 'id')
    if not ok:
        logger.warning(f"Duplicate item ids in input: {duplicates[:10]}")

    items = [SchedulableItemRecord.model_validate(r).to_item() for r in records]
    logger.info(f"Loaded {len(items)} items")
    return items


def items_from_dataframe(df: pd.DataFrame) -> list[SchedulableItem]:
    """
    Load items from a DataFrame, one row per item.

    Missing cells (NaN/NaT) are treated as absent values.
    """
    records = df.astype(object).where(pd.notna(df), None).to_dict('records')
    return load_items(records)


def load_items_csv(path: Union[str, Path]) -> list[SchedulableItem]:
    """
    Load items from a CSV export.

    Expected columns: id, name, start_date, end_date, progress, priority,
    dependencies, resource_requirements, status. Only ``id`` is required;
    list columns hold ids separated by ``;`` or ``,``.

    Args:
        path: CSV file path

    Returns:
        List of SchedulableItem
    """
    path = Path(path)
    df = pd.read_csv(path, dtype={'id': str})
    logger.debug(f"Read {len(df)} rows from {path}")
    return items_from_dataframe(df)
