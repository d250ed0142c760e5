"""
Column mapping: which sheet header holds each semantic tracker field.

A mapping file is JSON, either a flat object or {"mappings": {...}}. Keys may
use the snake_case field names below or the camelCase names older tracker
exports were configured with (screeningDone, clientRound, ...). Missing keys
fall back to DEFAULT_MAPPINGS; an empty/null header leaves the field unbound.
"""

from __future__ import annotations

import json
import logging
import os

logger = logging.getLogger("recruitment_funnel.config")

DEFAULT_MAPPINGS: dict[str, str | None] = {
    "vendor": "VENDOR",
    "technology": "TECHNOLOGY",
    "experience": "YoE",
    "screening_done": "Screening Done",
    "screening_feedback": "Feedback",
    "rapid_fire": "Rapid Fire",
    "l1": "L1",
    "l2": "L2",
    "client_round": "Client Round",
    "offer_released": "Offer Released",
    "onboarded": "Onboarded",
    "rejection_type": "Rejection Type",
}

MAPPING_FIELDS = list(DEFAULT_MAPPINGS)

FIELD_ALIASES = {
    "screeningDone": "screening_done",
    "screeningFeedback": "screening_feedback",
    "rapidFire": "rapid_fire",
    "clientRound": "client_round",
    "offerReleased": "offer_released",
    "rejectionType": "rejection_type",
}


def canonical_field(name: str) -> str:
    key = str(name).strip()
    key = FIELD_ALIASES.get(key, key)
    if key not in DEFAULT_MAPPINGS:
        raise ValueError(f"Unknown mapping field '{name}'. Expected one of: {', '.join(MAPPING_FIELDS)}.")
    return key


def merge_mappings(overrides: dict | None) -> dict[str, str | None]:
    merged = dict(DEFAULT_MAPPINGS)
    for name, header in (overrides or {}).items():
        field = canonical_field(name)
        if header is None:
            merged[field] = None
            continue
        if not isinstance(header, str):
            raise ValueError(f"Mapping for '{name}' must be a column header string or null.")
        merged[field] = header.strip() or None
    return merged


def load_column_mappings(path: str | None) -> dict[str, str | None]:
    if not path or not os.path.exists(path):
        if path:
            logger.info(f"Mapping file {path} not found; using default column mappings")
        return dict(DEFAULT_MAPPINGS)

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    entries = data.get("mappings", data) if isinstance(data, dict) else data
    if not isinstance(entries, dict):
        raise ValueError("Mapping config must be an object or {\"mappings\": {...}}.")
    return merge_mappings(entries)


def save_column_mappings(path: str, mappings: dict[str, str | None]) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    payload = {"mappings": {field: mappings.get(field) for field in MAPPING_FIELDS}}
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def parse_mapping_overrides(items: list[str] | None) -> dict[str, str | None]:
    """Parse repeated ``field=Header`` arguments; ``field=`` unbinds the field."""
    overrides: dict[str, str | None] = {}
    for item in items or []:
        if "=" not in item:
            raise ValueError(f"Invalid --map value '{item}'. Use field=Column Header.")
        name, header = item.split("=", 1)
        overrides[canonical_field(name)] = header.strip() or None
    return overrides


def find_column(headers: list[str], preferred: list[str]) -> str | None:
    cols = {str(c).strip().lower(): c for c in headers}
    for p in preferred:
        if p.lower() in cols:
            return cols[p.lower()]
    return None


def resolve_mappings(headers: list[str], mappings: dict[str, str | None]) -> dict[str, str | None]:
    """
    Bind each field to the header actually present in the table.

    Headers match case-insensitively after trimming. Fields whose header is
    missing from the table are unbound and logged.
    """
    resolved: dict[str, str | None] = {}
    for field in MAPPING_FIELDS:
        wanted = mappings.get(field)
        if not wanted:
            resolved[field] = None
            continue
        actual = find_column(headers, [wanted.strip()])
        if actual is None:
            logger.warning(f"Column '{wanted}' for field '{field}' not found in sheet headers")
        resolved[field] = actual
    return resolved
