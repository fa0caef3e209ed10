"""
ADEME record normalization.

This module is the single place that knows ADEME field names. Every raw
dataset row goes through normalize_record() and comes out as a
CertificateRecord; scoring and ranking never see upstream keys.

Two schemas are supported:
- "v2": dpe-v2-logements-existants, with labels like "N°DPE" and "Nom__commune_(BAN)"
- "v3": dpe03existant, with snake_case keys like "numero_dpe" and "nom_commune_ban"
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from datetime import date, datetime
from typing import Any

from dpe_matcher.domain.models import CertificateRecord, Coordinate

logger = logging.getLogger(__name__)

SCHEMA_V2 = "v2"
SCHEMA_V3 = "v3"

# Canonical field -> upstream keys, tried in order (first non-empty wins)
FIELD_MAP: dict[str, dict[str, tuple[str, ...]]] = {
    SCHEMA_V2: {
        "certificate_id": ("N°DPE",),
        "address": ("Adresse_brute", "Adresse_(BAN)"),
        "commune": ("Nom__commune_(BAN)",),
        "department": ("N°_département_(BAN)",),
        "postal_code": ("Code_postal_(BAN)",),
        "insee_code": ("Code_INSEE_(BAN)",),
        "geopoint": ("_geopoint",),
        "energy_class": ("Etiquette_DPE",),
        "ghg_class": ("Etiquette_GES",),
        "surface": ("Surface_habitable_logement",),
        "annual_cost": ("Coût_total_5_usages",),
        "established_on": ("Date_établissement_DPE",),
        "expires_on": ("Date_fin_validité_DPE",),
        "building_type": ("Type_bâtiment",),
        "year_built": ("Année_construction",),
        "energy_consumption": ("Conso_5_usages_par_m²_é_finale",),
        "ghg_emission": ("Emission_GES_5_usages_par_m²",),
    },
    SCHEMA_V3: {
        "certificate_id": ("numero_dpe",),
        "address": ("adresse_brut", "adresse_ban"),
        "commune": ("nom_commune_ban",),
        "department": ("code_departement_ban",),
        "postal_code": ("code_postal_ban",),
        "insee_code": ("code_insee_ban",),
        "geopoint": ("_geopoint",),
        "energy_class": ("etiquette_dpe",),
        "ghg_class": ("etiquette_ges",),
        "surface": ("surface_habitable_logement",),
        "annual_cost": ("cout_total_5_usages",),
        "established_on": ("date_etablissement_dpe",),
        "expires_on": ("date_fin_validite_dpe",),
        "building_type": ("type_batiment",),
        "year_built": ("annee_construction",),
        "energy_consumption": ("conso_5_usages_par_m2_ef",),
        "ghg_emission": ("emission_ges_5_usages_par_m2",),
    },
}

VALID_CLASSES = frozenset("ABCDEFG")

_DEPARTMENT_PATTERN = re.compile(r"^(?:\d{2}|2[AB])$", re.IGNORECASE)


def detect_schema(raw: dict[str, Any]) -> str | None:
    """Return the schema a raw row belongs to, or None if it has no known id key."""
    for schema, fields in FIELD_MAP.items():
        if any(key in raw for key in fields["certificate_id"]):
            return schema
    return None


def _first(raw: dict[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).replace(",", ".").strip())
    except ValueError:
        return None


def _integer(value: Any) -> int | None:
    number = _number(value)
    return int(number) if number is not None else None


def parse_date(value: Any) -> date | None:
    """Parse an ADEME date ("2023-05-17" or an ISO timestamp) into a date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.debug(f"Unparseable DPE date: {text!r}")
        return None


def parse_energy_class(value: Any) -> str | None:
    """Normalize an energy/GHG label to A-G; anything else (e.g. "N.C.") becomes None."""
    text = _text(value)
    if text is None:
        return None
    text = text.upper()
    return text if text in VALID_CLASSES else None


def parse_geopoint(value: Any) -> Coordinate | None:
    """
    Parse the `_geopoint` field ("lat,lon") into a Coordinate.

    Returns None for missing, malformed, or out-of-range values.
    """
    text = _text(value)
    if text is None:
        return None
    parts = text.split(",")
    if len(parts) != 2:
        return None
    lat = _number(parts[0])
    lon = _number(parts[1])
    if lat is None or lon is None:
        return None
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0):
        return None
    return Coordinate(lat=lat, lon=lon)


def normalize_department(value: Any, postal_code: str | None = None) -> str | None:
    """
    Normalize a department code, falling back to the postal code prefix.

    Corsican postal codes (20xxx) cannot be split into 2A/2B from the postal
    code alone, so they only resolve when the department field is present.
    """
    text = _text(value)
    if text is not None:
        if text.isdigit() and len(text) == 1:
            text = text.zfill(2)
        return text.upper()
    if postal_code and len(postal_code) >= 2 and postal_code[:2].isdigit():
        prefix = postal_code[:2]
        if prefix != "20":
            return prefix
    return None


def is_department_code(value: str | None) -> bool:
    """True for metropolitan department codes ("01"-"95", "2A", "2B")."""
    return bool(value) and bool(_DEPARTMENT_PATTERN.match(value))


def normalize_record(raw: dict[str, Any], schema: str | None = None) -> CertificateRecord | None:
    """
    Map one raw ADEME row onto a CertificateRecord.

    Args:
        raw: Row from the `results` array of the ADEME lines endpoint
        schema: Force a schema ("v2"/"v3"); detected from the keys if omitted

    Returns:
        CertificateRecord, or None if the row has no certificate id
    """
    schema = schema or detect_schema(raw)
    if schema is None or schema not in FIELD_MAP:
        logger.debug("Skipping DPE row with no recognizable certificate id")
        return None

    fields = FIELD_MAP[schema]

    def get(name: str) -> Any:
        return _first(raw, fields[name])

    certificate_id = _text(get("certificate_id"))
    if certificate_id is None:
        logger.debug("Skipping DPE row with empty certificate id")
        return None

    postal_code = _text(get("postal_code"))

    return CertificateRecord(
        certificate_id=certificate_id,
        address=_text(get("address")),
        commune=_text(get("commune")),
        department=normalize_department(get("department"), postal_code),
        postal_code=postal_code,
        coordinate=parse_geopoint(get("geopoint")),
        energy_class=parse_energy_class(get("energy_class")),
        ghg_class=parse_energy_class(get("ghg_class")),
        surface=_number(get("surface")),
        annual_cost=_number(get("annual_cost")),
        established_on=parse_date(get("established_on")),
        expires_on=parse_date(get("expires_on")),
        building_type=_text(get("building_type")),
        year_built=_integer(get("year_built")),
        energy_consumption=_number(get("energy_consumption")),
        ghg_emission=_number(get("ghg_emission")),
        insee_code=_text(get("insee_code")),
        source_schema=schema,
    )


def normalize_records(
    rows: Iterable[dict[str, Any]],
    schema: str | None = None,
) -> list[CertificateRecord]:
    """Normalize a batch of rows, dropping those without a certificate id."""
    records = []
    skipped = 0
    for raw in rows:
        if not isinstance(raw, dict):
            skipped += 1
            continue
        record = normalize_record(raw, schema)
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        logger.debug(f"Dropped {skipped} DPE rows without a usable certificate id")
    return records
