"""
Upstream data sources.

The ADEME client and the normalization layer that turns its rows into
CertificateRecord instances.
"""

from dpe_matcher.sources.ademe import DpeClient
from dpe_matcher.sources.normalization import normalize_record, normalize_records

__all__ = [
    "DpeClient",
    "normalize_record",
    "normalize_records",
]
