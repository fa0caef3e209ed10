"""
Search Strategy Module.

Builds the textual queries used to acquire DPE candidates for a property.
Each strategy is one independent request against the ADEME API.
"""

from __future__ import annotations

from dataclasses import dataclass

from dpe_matcher.domain.models import PropertyDescriptor

STRATEGY_COMMUNE_DEPARTMENT = "commune_department"
STRATEGY_POSTAL_PATTERN = "postal_pattern"


@dataclass(frozen=True)
class SearchStrategy:
    """One free-text query against the DPE dataset."""

    name: str
    query: str
    priority: int  # Lower runs first and wins deduplication ties

    def __str__(self) -> str:
        return f"{self.name}({self.query!r})"


def build_strategies(descriptor: PropertyDescriptor) -> list[SearchStrategy]:
    """
    Build search strategies for a descriptor, in priority order.

    - commune + department free text, when both are known
    - department postal-code prefix wildcard, whenever the department is known

    The two are complementary: both run and their results are merged.
    """
    strategies = []
    department = (descriptor.department or "").strip()
    commune = (descriptor.commune or "").strip()

    if commune and department:
        strategies.append(
            SearchStrategy(
                name=STRATEGY_COMMUNE_DEPARTMENT,
                query=f"{commune} {department}",
                priority=1,
            )
        )

    if department:
        strategies.append(
            SearchStrategy(
                name=STRATEGY_POSTAL_PATTERN,
                query=f"{department}*",
                priority=2,
            )
        )

    return sorted(strategies, key=lambda s: s.priority)
