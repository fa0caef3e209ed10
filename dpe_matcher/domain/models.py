"""
Data models for DPE matching.

These dataclasses represent the property being searched for, the
normalized certificate records returned by the ADEME API, and the
per-query wrappers produced by the classifier and the proximity ranker.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from dpe_matcher.constants import EXACT_MATCH_THRESHOLD


@dataclass(frozen=True)
class Coordinate:
    """WGS84 point in decimal degrees."""

    lat: float
    lon: float


@dataclass(frozen=True)
class PropertyDescriptor:
    """
    The physical property a certificate is searched for.

    Only the department is required for classification; everything else
    narrows or strengthens the match when present.
    """

    department: str | None = None  # 2-character department code, e.g. "75", "2A"
    commune: str | None = None  # Free-text commune name
    section: str | None = None  # Cadastral section, e.g. "AB"
    numero: str | None = None  # Cadastral parcel number, e.g. "0123"
    coordinate: Coordinate | None = None
    cadastral_id: str | None = None  # Caller-side identifier, for logging only

    def label(self) -> str:
        """Short human-readable label for log lines."""
        if self.cadastral_id:
            return self.cadastral_id
        parts = [self.department, self.commune, self.section, self.numero]
        return " ".join(p for p in parts if p) or "<empty descriptor>"


@dataclass(frozen=True, eq=False)
class CertificateRecord:
    """
    One DPE certificate, normalized from an ADEME dataset row.

    Identity is the certificate id: two records with the same id are the
    same certificate even if the strategies that fetched them disagree on
    other fields.
    """

    certificate_id: str
    address: str | None = None
    commune: str | None = None
    department: str | None = None
    postal_code: str | None = None
    coordinate: Coordinate | None = None
    energy_class: str | None = None  # A-G
    ghg_class: str | None = None  # A-G
    surface: float | None = None  # Habitable surface, m²
    annual_cost: float | None = None  # Total cost of the 5 usages, EUR/year
    established_on: date | None = None
    expires_on: date | None = None
    building_type: str | None = None
    year_built: int | None = None
    energy_consumption: float | None = None  # kWh/m²/year
    ghg_emission: float | None = None  # kgCO2/m²/year
    insee_code: str | None = None
    source_schema: str | None = None  # Which upstream schema produced this record

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CertificateRecord):
            return NotImplemented
        return self.certificate_id == other.certificate_id

    def __hash__(self) -> int:
        return hash(self.certificate_id)

    def is_active(self, on: date | None = None) -> bool:
        """True if the certificate has not expired on the given day (default: today)."""
        if self.expires_on is None:
            return False
        return self.expires_on > (on or date.today())

    def to_summary(self, on: date | None = None) -> dict[str, Any]:
        """Display-oriented summary of the certificate."""
        return {
            "dpe_id": self.certificate_id,
            "address": self.address or "Unknown",
            "energy": self.energy_class or "N/A",
            "ghg": self.ghg_class or "N/A",
            "consumption": self.energy_consumption,
            "year_built": self.year_built,
            "surface_area": self.surface,
            "annual_cost": self.annual_cost,
            "establishment_date": self.established_on.isoformat() if self.established_on else None,
            "expiry_date": self.expires_on.isoformat() if self.expires_on else None,
            "is_active": self.is_active(on),
            "building_type": self.building_type,
        }


@dataclass
class ScoredCandidate:
    """A certificate with its exactness score and the rules that produced it."""

    record: CertificateRecord
    score: int
    breakdown: dict[str, int] = field(default_factory=dict)  # rule name -> points, in rule order
    disqualification: str | None = None  # Set iff a hard gate forced the score to 0

    @property
    def certificate_id(self) -> str:
        return self.record.certificate_id

    @property
    def qualified(self) -> bool:
        return self.disqualification is None and self.score > 0

    def to_dict(self, threshold: int = EXACT_MATCH_THRESHOLD) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        if self.disqualification:
            reason = f"Disqualified: {self.disqualification}"
        elif self.score < threshold:
            reason = f"Score: {self.score}/100 - Not exact enough"
        else:
            reason = "Qualified candidate"
        return {
            "id": self.record.certificate_id,
            "address": self.record.address or "Unknown",
            "energy_class": self.record.energy_class,
            "ghg_class": self.record.ghg_class,
            "surface": self.record.surface,
            "annual_cost": self.record.annual_cost,
            "establishment_date": (
                self.record.established_on.isoformat() if self.record.established_on else None
            ),
            "score": self.score,
            "breakdown": dict(self.breakdown),
            "reason": reason,
        }


@dataclass(frozen=True)
class DistancedCandidate:
    """A certificate with its great-circle distance from a query point."""

    record: CertificateRecord
    distance_m: float

    @property
    def certificate_id(self) -> str:
        return self.record.certificate_id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.record.certificate_id,
            "address": self.record.address,
            "commune": self.record.commune,
            "postal_code": self.record.postal_code,
            "energy_class": self.record.energy_class,
            "ghg_class": self.record.ghg_class,
            "distance_m": round(self.distance_m, 1),
        }
