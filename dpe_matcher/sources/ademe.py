"""
ADEME DPE API client.

Thin wrapper over the data-fair `lines` endpoint of the ADEME open data
portal. Every failure (network error, timeout, non-2xx status, malformed
payload) is raised as UpstreamError so callers deal with one exception type.

No caching, rate limiting or retries happen here; those belong to the
calling layer.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from dpe_matcher.config import Settings, get_settings
from dpe_matcher.constants import CERTIFICATE_LOOKUP_SIZE
from dpe_matcher.domain.models import CertificateRecord
from dpe_matcher.errors import UpstreamError
from dpe_matcher.sources.normalization import (
    SCHEMA_V2,
    SCHEMA_V3,
    normalize_records,
)

logger = logging.getLogger(__name__)

# Schema of the rows returned by each known dataset
DATASET_SCHEMAS = {
    "dpe-v2-logements-existants": SCHEMA_V2,
    "dpe03existant": SCHEMA_V3,
}

# Fields needed for proximity ranking (the proximity dataset rows are wide)
PROXIMITY_SELECT = ",".join(
    [
        "numero_dpe",
        "adresse_brut",
        "adresse_ban",
        "nom_commune_ban",
        "code_postal_ban",
        "code_insee_ban",
        "code_departement_ban",
        "etiquette_dpe",
        "etiquette_ges",
        "_geopoint",
        "type_batiment",
        "date_etablissement_dpe",
        "date_fin_validite_dpe",
        "surface_habitable_logement",
        "conso_5_usages_par_m2_ef",
        "emission_ges_5_usages_par_m2",
    ]
)


class DpeClient:
    """
    Client for ADEME DPE datasets.

    A single client (and its requests.Session) may be shared by the threads
    of one acquisition; each call is independent.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": self.settings.user_agent,
                "Accept": "application/json",
            }
        )

    def dataset_url(self, dataset: str | None = None) -> str:
        """`lines` endpoint URL for a dataset (default: the classifier dataset)."""
        return f"{self.settings.ademe_base_url}/{dataset or self.settings.ademe_dataset}/lines"

    def fetch_rows(
        self,
        params: dict[str, Any],
        dataset: str | None = None,
        strategy: str | None = None,
    ) -> list[dict[str, Any]]:
        """
        Run one query against the `lines` endpoint and return its raw rows.

        Args:
            params: Query parameters (q, qs, size, select, ...)
            dataset: Dataset name (default: classifier dataset)
            strategy: Strategy name, attached to errors for diagnostics

        Raises:
            UpstreamError: On any network, status or payload failure
        """
        url = self.dataset_url(dataset)
        try:
            response = self.session.get(url, params=params, timeout=self.settings.request_timeout)
        except requests.exceptions.Timeout as e:
            raise UpstreamError(
                f"DPE API timed out after {self.settings.request_timeout}s", strategy=strategy
            ) from e
        except requests.exceptions.RequestException as e:
            raise UpstreamError(f"DPE API request failed: {e}", strategy=strategy) from e

        if not response.ok:
            raise UpstreamError(
                f"DPE API error: HTTP {response.status_code}",
                strategy=strategy,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                "DPE API returned a non-JSON payload",
                strategy=strategy,
                status_code=response.status_code,
            ) from e

        if not isinstance(data, dict):
            raise UpstreamError("DPE API returned an unexpected payload", strategy=strategy)

        rows = data.get("results") or []
        if not isinstance(rows, list):
            raise UpstreamError("DPE API `results` is not a list", strategy=strategy)

        logger.debug(
            f"DPE query {params.get('q') or params.get('qs')!r} returned "
            f"{len(rows)} rows (total {data.get('total', '?')})"
        )
        return rows

    def search(
        self,
        query: str,
        size: int | None = None,
        strategy: str | None = None,
        dataset: str | None = None,
    ) -> list[CertificateRecord]:
        """
        Free-text search with a full-field projection.

        Args:
            query: Free-text query string (data-fair `q` parameter)
            size: Result cap (default: settings.strategy_result_size)
            strategy: Strategy name, attached to errors for diagnostics
            dataset: Dataset name (default: classifier dataset)

        Returns:
            Normalized records (rows without an id are dropped)
        """
        dataset = dataset or self.settings.ademe_dataset
        params = {
            "q": query,
            "size": size or self.settings.strategy_result_size,
            "select": "*",
        }
        rows = self.fetch_rows(params, dataset=dataset, strategy=strategy)
        return normalize_records(rows, DATASET_SCHEMAS.get(dataset))

    def search_postal_code(
        self,
        postal_code: str,
        size: int | None = None,
        dataset: str | None = None,
    ) -> list[CertificateRecord]:
        """
        Fetch every certificate of one postal code (the proximity ranker's pool).

        Uses an exact field filter rather than free text, so neighbouring
        postal codes never leak in.
        """
        dataset = dataset or self.settings.ademe_proximity_dataset
        schema = DATASET_SCHEMAS.get(dataset, SCHEMA_V3)
        field = "Code_postal_(BAN)" if schema == SCHEMA_V2 else "code_postal_ban"
        params = {
            "qs": f'{field}:"{postal_code}"',
            "size": size or self.settings.proximity_result_size,
        }
        if schema == SCHEMA_V3:
            params["select"] = PROXIMITY_SELECT
        rows = self.fetch_rows(params, dataset=dataset, strategy="postal_code")
        return normalize_records(rows, schema)

    def get_certificate(self, certificate_id: str) -> CertificateRecord | None:
        """
        Look up one certificate by its id.

        Returns:
            The record, or None if the dataset has no such certificate
        """
        certificate_id = certificate_id.strip()
        if not certificate_id:
            return None
        dataset = self.settings.ademe_dataset
        schema = DATASET_SCHEMAS.get(dataset, SCHEMA_V2)
        field = "N°DPE" if schema == SCHEMA_V2 else "numero_dpe"
        params = {"qs": f'{field}:"{certificate_id}"', "size": CERTIFICATE_LOOKUP_SIZE}
        rows = self.fetch_rows(params, dataset=dataset, strategy="certificate_id")
        for record in normalize_records(rows, schema):
            if record.certificate_id == certificate_id:
                return record
        return None
