"""Trait Analysis: genotype map + static rule table -> ordered insight list.

Invariants:
    - analyze_all_traits returns insights in TRAIT_ORDER, skipping traits with
      a missing SNP or an unruled genotype
    - group_by_category always returns all four categories, in TraitCategory order
    - build_report_data persists only the genotypes the report reads, never the raw file
    - Pure functions: no IO, no logging of genotype data

Design Decisions:
    - InsightResult.to_dict() produces the JSON shape stored in the encrypted blob
      and returned by the API (snake_case keys)
"""

from dataclasses import dataclass, asdict
from datetime import datetime

from geni.core.domain_types import (
    ConfidenceLevel, FileFormat, RiskLevel, TraitCategory,
)
from geni.core.parse_genome import GenotypeMap, ParseResult, get_genotype, serialize_genotypes
from geni.core.trait_definitions import TRAITS, TRAIT_ORDER, TraitDefinition

DEFAULT_PREVIEW_COUNT = 3


@dataclass
class InsightResult:
    """One trait as it appears in a report."""
    trait_id: str
    title: str
    genotype: str
    summary: str
    confidence: ConfidenceLevel
    confidence_note: str
    what_to_do_next: list[str]
    risk_level: RiskLevel
    category: TraitCategory

    def to_dict(self) -> dict:
        data = asdict(self)
        data["confidence"] = self.confidence.value
        data["risk_level"] = self.risk_level.value
        data["category"] = self.category.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "InsightResult":
        return cls(
            trait_id=data["trait_id"],
            title=data["title"],
            genotype=data["genotype"],
            summary=data["summary"],
            confidence=ConfidenceLevel(data["confidence"]),
            confidence_note=data["confidence_note"],
            what_to_do_next=list(data["what_to_do_next"]),
            risk_level=RiskLevel(data["risk_level"]),
            category=TraitCategory(data["category"]),
        )


def analyze_trait(genotypes: GenotypeMap, trait_id: str) -> InsightResult | None:
    """Interpret one trait. None for unknown trait, missing SNP or unruled genotype."""
    trait = TRAITS.get(trait_id)
    if trait is None:
        return None

    genotype = get_genotype(genotypes, trait.rsid)
    if not genotype:
        return None

    interpretation = trait.interpret(genotype)
    if interpretation is None:
        return None

    return InsightResult(
        trait_id=trait.id,
        title=trait.title,
        genotype=genotype,
        summary=interpretation.summary,
        confidence=interpretation.confidence,
        confidence_note=interpretation.confidence_note,
        what_to_do_next=list(interpretation.what_to_do_next),
        risk_level=interpretation.risk_level,
        category=trait.category,
    )


def analyze_all_traits(genotypes: GenotypeMap) -> list[InsightResult]:
    """Interpret every trait the map covers, in report order."""
    results = []
    for trait_id in TRAIT_ORDER:
        insight = analyze_trait(genotypes, trait_id)
        if insight is not None:
            results.append(insight)
    return results


def group_by_category(
    insights: list[InsightResult],
) -> dict[str, list[InsightResult]]:
    grouped: dict[str, list[InsightResult]] = {c.value: [] for c in TraitCategory}
    for insight in insights:
        grouped[insight.category.value].append(insight)
    return grouped


def get_available_traits() -> list[str]:
    return list(TRAIT_ORDER)


def get_trait_definition(trait_id: str) -> TraitDefinition | None:
    return TRAITS.get(trait_id)


def get_all_rsids() -> list[str]:
    return [TRAITS[t].rsid for t in TRAIT_ORDER]


def preview_insights(
    insights: list[InsightResult], limit: int = DEFAULT_PREVIEW_COUNT,
) -> list[InsightResult]:
    """Free-tier teaser: the first `limit` insights in report order."""
    return insights[:max(limit, 0)]


def build_report_data(
    parsed: ParseResult,
    insights: list[InsightResult],
    created_at: datetime,
) -> dict:
    """Assemble the JSON document that gets encrypted and stored."""
    return {
        "genotypes": serialize_genotypes(parsed.data, get_all_rsids()),
        "insights": [i.to_dict() for i in insights],
        "snp_count": parsed.snp_count,
        "format": parsed.format.value,
        "created_at": created_at.isoformat(),
    }


def report_format(report_data: dict) -> FileFormat:
    return FileFormat(report_data.get("format", FileFormat.UNKNOWN.value))
