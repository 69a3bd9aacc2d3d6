"""Shared utilities."""

from .logger import configure_logging
from .validators import validate_no_duplicates, validate_required_fields

__all__ = ['configure_logging', 'validate_no_duplicates', 'validate_required_fields']
