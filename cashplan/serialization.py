"""
Serialization module for CashPlan persistence.

Purpose
-------
Provides JSON serialization and deserialization for household datasets and
engine configurations, enabling persistence, sharing, and version control.

Supports serialization of:
- Household datasets (plans, observed activity, cards, goals, paid
  installments) into an ``InMemoryRepository``
- EngineConfig files
- Derived views (aggregates, KPIs, forecasts, comparisons, installments,
  allocations) for CLI ``--output`` files

Design Principles
-----------------
- Type-safe: Uses Pydantic configs for validation
- Human-readable: JSON format for easy editing
- Backward compatible: Validates schema versions

Example
-------
>>> from pathlib import Path
>>> from cashplan.serialization import load_dataset, save_dataset
>>>
>>> repo = load_dataset(Path("household.json"))
>>> repo.record_contribution("goal_1", 50_000, "ARS")
>>> save_dataset(repo, Path("household.json"))
"""

from __future__ import annotations
from typing import Any, Dict
from pathlib import Path
from dataclasses import asdict, is_dataclass
from datetime import date
import json
import warnings

import numpy as np

from .config import DatasetConfig, EngineConfig
from .repository import InMemoryRepository

__all__ = [
    "SCHEMA_VERSION",
    "to_jsonable",
    "record_to_dict",
    "dataset_to_dict",
    "dataset_from_dict",
    "save_dataset",
    "load_dataset",
    "save_engine_config",
    "load_engine_config",
    "save_json",
]


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "0.1.0"


def _check_schema_version(data: Dict[str, Any], kind: str) -> None:
    schema_version = data.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"{kind} schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )


# ---------------------------------------------------------------------------
# Generic conversion
# ---------------------------------------------------------------------------

def to_jsonable(obj: Any) -> Any:
    """
    Convert derived views and records to JSON-ready structures.

    Dataclasses use their ``to_dict()`` when they define one; dates become
    ISO strings, tuples become lists and numpy scalars become Python numbers.

    Examples
    --------
    >>> to_jsonable({"due": date(2025, 2, 10), "amounts": (1.0, np.float64(2.5))})
    {'due': '2025-02-10', 'amounts': [1.0, 2.5]}
    """
    if hasattr(obj, "to_dict") and is_dataclass(obj):
        return to_jsonable(obj.to_dict())
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_jsonable(asdict(obj))
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, dict):
        return {str(k): to_jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        items = sorted(obj) if isinstance(obj, (set, frozenset)) else obj
        return [to_jsonable(v) for v in items]
    return obj


def record_to_dict(record: Any) -> Dict[str, Any]:
    """Dataset representation of a source record (dates as ISO strings)."""
    return to_jsonable(asdict(record))


def save_json(obj: Any, path: Path) -> None:
    """Write any derived view as indented JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(to_jsonable(obj), f, indent=2)


# ---------------------------------------------------------------------------
# Dataset Serialization
# ---------------------------------------------------------------------------

def dataset_to_dict(repo: InMemoryRepository) -> Dict[str, Any]:
    """Dataset dictionary for *repo*, tagged with the schema version."""
    return {
        "schema_version": SCHEMA_VERSION,
        "planned_incomes": [record_to_dict(r) for r in repo.planned_incomes()],
        "observed_incomes": [record_to_dict(r) for r in repo.observed_incomes()],
        "planned_expenses": [record_to_dict(r) for r in repo.planned_expenses()],
        "observed_expenses": [record_to_dict(r) for r in repo.observed_expenses()],
        "cards": [record_to_dict(r) for r in repo.cards()],
        "goals": [record_to_dict(r) for r in repo.goals()],
        "paid_installments": sorted(repo.paid_installments()),
    }


def dataset_from_dict(data: Dict[str, Any]) -> InMemoryRepository:
    """
    Validate a dataset dictionary and build a repository.

    Raises
    ------
    pydantic.ValidationError
        If the document does not match the dataset schema.
    cashplan.exceptions.ValidationError
        If a record violates a domain invariant.
    """
    _check_schema_version(data, "Dataset")
    config = DatasetConfig.model_validate(data)
    return InMemoryRepository(
        planned_incomes=[c.to_record() for c in config.planned_incomes],
        observed_incomes=[c.to_record() for c in config.observed_incomes],
        planned_expenses=[c.to_record() for c in config.planned_expenses],
        observed_expenses=[c.to_record() for c in config.observed_expenses],
        cards=[c.to_record() for c in config.cards],
        goals=[c.to_record() for c in config.goals],
        paid_installments=config.paid_installments,
    )


def save_dataset(repo: InMemoryRepository, path: Path) -> None:
    """
    Save a repository to a JSON dataset file.

    Examples
    --------
    >>> save_dataset(repo, Path("household.json"))
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(dataset_to_dict(repo), f, indent=2)


def load_dataset(path: Path) -> InMemoryRepository:
    """
    Load a JSON dataset file into a fresh repository.

    Examples
    --------
    >>> repo = load_dataset(Path("household.json"))
    >>> len(repo.planned_incomes())
    2
    """
    with open(path, "r") as f:
        data = json.load(f)
    return dataset_from_dict(data)


# ---------------------------------------------------------------------------
# EngineConfig Serialization
# ---------------------------------------------------------------------------

def save_engine_config(config: EngineConfig, path: Path) -> None:
    """Save an EngineConfig (plus schema version) to JSON."""
    data: Dict[str, Any] = {"schema_version": SCHEMA_VERSION}
    data.update(config.model_dump(mode="json"))
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)


def load_engine_config(path: Path) -> EngineConfig:
    """Load and validate an EngineConfig JSON file."""
    with open(path, "r") as f:
        data = json.load(f)
    _check_schema_version(data, "Config")
    data.pop("schema_version", None)
    return EngineConfig.model_validate(data)
