"""Loaders for seed files and persisted rows."""

from .json_loader import (
    load_seed_from_json,
    parse_seed_dict,
    validate_seed_dict,
    validate_seed_file,
)

__all__ = [
    "load_seed_from_json",
    "parse_seed_dict",
    "validate_seed_dict",
    "validate_seed_file",
]
