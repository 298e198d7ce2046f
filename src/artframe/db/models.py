"""Domain models and column vocabularies for the artframe tables."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Any

SOURCES_TABLE = "sources"
ARTWORK_TABLE = "artwork"

SOURCE_COLUMNS: tuple[str, ...] = (
    "id",
    "component_ref",
    "is_selected",
    "description",
    "wants_network",
    "supports_next_command",
    "commands",
)

ARTWORK_COLUMNS: tuple[str, ...] = (
    "id",
    "source_ref",
    "image_uri",
    "title",
    "byline",
    "attribution",
    "token",
    "view_intent",
    "meta_font",
)

# Stored as INTEGER 0/1, surfaced as bool.
BOOLEAN_COLUMNS: frozenset[str] = frozenset(
    {"is_selected", "wants_network", "supports_next_command"}
)

SOURCE_REQUIRED = "component_ref"
ARTWORK_REQUIRED = "source_ref"

# Artwork is a single logical "current" row at this identity.
ARTWORK_SINGLETON_ID = 1


@dataclass
class Source:
    id: int
    component_ref: str
    is_selected: bool = False
    description: str | None = None
    wants_network: bool = False
    supports_next_command: bool = False
    commands: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any] | sqlite3.Row) -> Source:
        return cls(
            id=row["id"],
            component_ref=row["component_ref"],
            is_selected=bool(row["is_selected"]),
            description=row["description"],
            wants_network=bool(row["wants_network"]),
            supports_next_command=bool(row["supports_next_command"]),
            commands=row["commands"],
        )


@dataclass
class Artwork:
    id: int
    source_ref: str
    image_uri: str | None = None
    title: str | None = None
    byline: str | None = None
    attribution: str | None = None
    token: str | None = None
    view_intent: str | None = None
    meta_font: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any] | sqlite3.Row) -> Artwork:
        return cls(**{col: row[col] for col in ARTWORK_COLUMNS})


def encode_values(values: dict[str, Any]) -> dict[str, Any]:
    """Return *values* with boolean columns stored as 0/1 integers."""
    return {
        k: (None if v is None else int(bool(v))) if k in BOOLEAN_COLUMNS else v
        for k, v in values.items()
    }


def decode_row(row: sqlite3.Row) -> dict[str, Any]:
    """Convert a sqlite3.Row into a plain dict with booleans decoded."""
    out: dict[str, Any] = {}
    for key in row.keys():
        value = row[key]
        if key in BOOLEAN_COLUMNS and value is not None:
            value = bool(value)
        out[key] = value
    return out
