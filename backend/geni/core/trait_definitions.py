"""Trait Definitions: static rule table mapping a genotype at one rsID to canned text.

Invariants:
    - Every trait keys its rules by NORMALIZED genotype (alleles sorted, uppercase)
    - TRAIT_ORDER lists every key of TRAITS exactly once, in report order
    - Each trait reads exactly one rsID; rsIDs are lowercase
    - A genotype with no rule yields None (never a default interpretation)

Design Decisions:
    - Rules are data (dict lookup), not per-trait functions: the table can be
      audited, serialized and tested without executing interpretation code
    - Heterozygous/homozygous variants that share text but differ in risk level
      are spelled out as separate Interpretation entries
"""

from dataclasses import dataclass, field

from geni.core.domain_types import ConfidenceLevel, RiskLevel, TraitCategory


@dataclass(frozen=True)
class Interpretation:
    """Canned text for one genotype of one trait."""
    summary: str
    confidence: ConfidenceLevel
    confidence_note: str
    what_to_do_next: tuple[str, ...]
    risk_level: RiskLevel


@dataclass(frozen=True)
class TraitDefinition:
    """One trait: a single rsID plus its genotype -> interpretation rules."""
    id: str
    title: str
    rsid: str
    category: TraitCategory
    rules: dict[str, Interpretation] = field(default_factory=dict)

    def interpret(self, genotype: str) -> Interpretation | None:
        """Look up the interpretation for a normalized genotype."""
        return self.rules.get(genotype.upper())


_HIGH = ConfidenceLevel.HIGH
_MODERATE = ConfidenceLevel.MODERATE


def _rule(
    summary: str,
    confidence: ConfidenceLevel,
    note: str,
    steps: list[str],
    risk: RiskLevel,
) -> Interpretation:
    return Interpretation(summary, confidence, note, tuple(steps), risk)


# ─── Diet ────────────────────────────────────────────────────────

_LACTASE_PERSISTENT = _rule(
    "You likely produce lactase throughout adulthood, meaning you can digest dairy without issues.",
    _HIGH, "Well-studied genetic variant with strong scientific evidence.",
    [
        "Dairy products should be well-tolerated",
        "No genetic reason to avoid milk, cheese, or yogurt",
    ],
    RiskLevel.OPTIMAL,
)

LACTOSE_TOLERANCE = TraitDefinition(
    id="lactose-tolerance",
    title="Lactose Tolerance",
    rsid="rs4988235",
    category=TraitCategory.DIET,
    rules={
        "AA": _LACTASE_PERSISTENT,
        "AG": _LACTASE_PERSISTENT,
        "GG": _rule(
            "You likely stop producing lactase after childhood. Dairy may cause digestive discomfort.",
            _HIGH, "Well-established genetic association.",
            [
                "Consider lactose-free alternatives",
                "Lactase supplements can help",
                "Fermented dairy may be better tolerated",
            ],
            RiskLevel.HIGH,
        ),
    },
)


def _slow_caffeine(risk: RiskLevel) -> Interpretation:
    return _rule(
        "You are a slow caffeine metabolizer. Caffeine stays in your system longer.",
        _HIGH, "Strong evidence linking this variant to slower caffeine clearance.",
        [
            "Limit caffeine intake, especially afternoon",
            "May experience more anxiety from coffee",
            "Consider switching to half-caf or decaf",
        ],
        risk,
    )


CAFFEINE_METABOLISM = TraitDefinition(
    id="caffeine-metabolism",
    title="Caffeine Metabolism",
    rsid="rs762551",
    category=TraitCategory.DIET,
    rules={
        "AA": _rule(
            "You are a fast caffeine metabolizer. Coffee is cleared quickly from your system.",
            _HIGH, "CYP1A2 gene variant well-studied for caffeine processing.",
            [
                "Moderate coffee intake generally safe",
                "Less likely to experience jitters",
                "May need more caffeine for alertness effect",
            ],
            RiskLevel.OPTIMAL,
        ),
        "AC": _slow_caffeine(RiskLevel.LOW),
        "CC": _slow_caffeine(RiskLevel.HIGH),
    },
)


def _alcohol_flush(risk: RiskLevel) -> Interpretation:
    return _rule(
        "You may experience facial flushing when drinking alcohol due to reduced ALDH2 activity.",
        _HIGH, "Strong genetic association with Asian flush reaction.",
        [
            "Limit alcohol consumption",
            "Increased risk of esophageal issues with heavy drinking",
            "Consider avoiding alcohol or drinking very moderately",
        ],
        risk,
    )


ALCOHOL_FLUSH = TraitDefinition(
    id="alcohol-flush",
    title="Alcohol Flush Reaction",
    rsid="rs671",
    category=TraitCategory.DIET,
    rules={
        "GG": _rule(
            "You have normal ALDH2 enzyme activity. Less likely to experience alcohol flush.",
            _HIGH, "ALDH2 variant well-documented in alcohol metabolism.",
            [
                "Normal alcohol metabolism expected",
                "Standard drinking guidelines apply",
                "Stay mindful of overall alcohol consumption",
            ],
            RiskLevel.OPTIMAL,
        ),
        "AG": _alcohol_flush(RiskLevel.LOW),
        "AA": _alcohol_flush(RiskLevel.HIGH),
    },
)

_REDUCED_BITTER = _rule(
    "You have reduced bitter taste sensitivity compared to supertasters.",
    _MODERATE, "Associated with lower sensitivity to bitter compounds.",
    [
        "Bitter vegetables may be more palatable",
        "Can enjoy a wider range of foods",
        "May need to be mindful of sugar intake",
    ],
    RiskLevel.OPTIMAL,
)

BITTER_TASTE = TraitDefinition(
    id="bitter-taste",
    title="Bitter Taste Sensitivity",
    rsid="rs713598",
    category=TraitCategory.DIET,
    rules={
        "CC": _rule(
            'You are likely a "supertaster" who perceives bitter compounds strongly.',
            _MODERATE, "TAS2R38 gene influences perception of bitter compounds like PTC.",
            [
                "May dislike cruciferous vegetables naturally",
                "Try cooking methods that reduce bitterness",
                "Dark leafy greens may taste very bitter",
            ],
            RiskLevel.LOW,
        ),
        "CG": _REDUCED_BITTER,
        "GG": _REDUCED_BITTER,
    },
)


def _reduced_b12(risk: RiskLevel) -> Interpretation:
    return _rule(
        "You may have reduced B12 absorption from food sources.",
        _MODERATE, "Associated with lower circulating B12 levels.",
        [
            "Consider B12 supplementation",
            "Get B12 levels tested regularly",
            "Sublingual or injectable B12 may be more effective",
        ],
        risk,
    )


VITAMIN_B12 = TraitDefinition(
    id="vitamin-b12",
    title="Vitamin B12 Absorption",
    rsid="rs602662",
    category=TraitCategory.DIET,
    rules={
        "GG": _rule(
            "You likely have optimal B12 absorption from dietary sources.",
            _MODERATE, "FUT2 gene affects B12 bioavailability.",
            [
                "Standard B12 intake should be sufficient",
                "Good sources: meat, fish, dairy, eggs",
                "Annual blood test can confirm levels",
            ],
            RiskLevel.OPTIMAL,
        ),
        "AG": _reduced_b12(RiskLevel.LOW),
        "AA": _reduced_b12(RiskLevel.HIGH),
    },
)


# ─── Fitness ─────────────────────────────────────────────────────

MUSCLE_FIBER_TYPE = TraitDefinition(
    id="muscle-fiber-type",
    title="Muscle Fiber Type",
    rsid="rs1815739",
    category=TraitCategory.FITNESS,
    rules={
        "CC": _rule(
            "You likely have more fast-twitch muscle fibers, favoring power and sprint activities.",
            _HIGH, "ACTN3 R577X variant well-studied in athletic performance.",
            [
                "May excel at sprinting, jumping, weightlifting",
                "Focus on explosive power training",
                "Recovery between intense sets important",
            ],
            RiskLevel.OPTIMAL,
        ),
        "CT": _rule(
            "You have a mix of muscle fiber types, suited for varied activities.",
            _HIGH, "Intermediate ACTN3 expression.",
            [
                "Versatile athletic potential",
                "Can train for both power and endurance",
                "Listen to your body for best results",
            ],
            RiskLevel.OPTIMAL,
        ),
        "TT": _rule(
            "You likely have more slow-twitch fibers, favoring endurance activities.",
            _HIGH, "No functional alpha-actinin-3 protein.",
            [
                "May excel at running, cycling, swimming",
                "Endurance training may feel natural",
                "Building explosive power may require more focus",
            ],
            RiskLevel.OPTIMAL,
        ),
    },
)

_POWER_LEANING = _rule(
    "Your genetics suggest balanced or power-leaning athletic traits.",
    _MODERATE, "Mixed endurance/power genetic indicators.",
    [
        "Experiment with different training styles",
        "HIIT may work well for you",
        "Strength training can complement cardio",
    ],
    RiskLevel.OPTIMAL,
)

ENDURANCE_POTENTIAL = TraitDefinition(
    id="endurance-potential",
    title="Endurance vs Power",
    rsid="rs7181866",
    category=TraitCategory.FITNESS,
    rules={
        "GG": _rule(
            "Your genetics suggest a tendency toward endurance-type performance.",
            _MODERATE, "Associated with aerobic capacity markers.",
            [
                "Consider endurance sports like running or cycling",
                "Zone 2 training may be especially effective",
                "Build aerobic base before intensity",
            ],
            RiskLevel.OPTIMAL,
        ),
        "AG": _POWER_LEANING,
        "AA": _POWER_LEANING,
    },
)

_REDUCED_COLLAGEN = _rule(
    "You may have slightly reduced collagen integrity, potentially affecting recovery.",
    _MODERATE, "Associated with altered collagen structure.",
    [
        "Prioritize adequate rest between intense sessions",
        "Consider collagen supplementation",
        "Focus on proper warm-up and cool-down",
    ],
    RiskLevel.LOW,
)

RECOVERY_SPEED = TraitDefinition(
    id="recovery-speed",
    title="Recovery Speed",
    rsid="rs1800012",
    category=TraitCategory.FITNESS,
    rules={
        "GG": _rule(
            "You likely have standard collagen production supporting normal recovery.",
            _MODERATE, "COL1A1 gene affects connective tissue.",
            [
                "Standard rest between workouts sufficient",
                "Include mobility work in routine",
                "Adequate protein supports recovery",
            ],
            RiskLevel.OPTIMAL,
        ),
        "AG": _REDUCED_COLLAGEN,
        "AA": _REDUCED_COLLAGEN,
    },
)


def _achilles_risk(risk: RiskLevel) -> Interpretation:
    return _rule(
        "You may have elevated risk for Achilles tendon issues.",
        _MODERATE, "Associated with altered matrix metalloproteinase activity.",
        [
            "Extra attention to calf stretching",
            "Gradual training load increases",
            "Consider heel drops for tendon strengthening",
        ],
        risk,
    )


ACHILLES_INJURY_RISK = TraitDefinition(
    id="achilles-injury-risk",
    title="Achilles Tendon Risk",
    rsid="rs679620",
    category=TraitCategory.FITNESS,
    rules={
        "AA": _rule(
            "You have a lower genetic risk for Achilles tendon injuries.",
            _MODERATE, "MMP3 gene variant linked to tendon injury risk.",
            [
                "Standard injury prevention applies",
                "Still warm up thoroughly",
                "Eccentric exercises good for tendon health",
            ],
            RiskLevel.OPTIMAL,
        ),
        "AG": _achilles_risk(RiskLevel.LOW),
        "GG": _achilles_risk(RiskLevel.HIGH),
    },
)


# ─── Wellness ────────────────────────────────────────────────────

def _low_vitamin_d(risk: RiskLevel) -> Interpretation:
    return _rule(
        "You may have lower baseline vitamin D levels and need more attention to intake.",
        _HIGH, "Strong association with lower circulating vitamin D.",
        [
            "Get vitamin D levels tested",
            "Consider D3 supplementation (2000-4000 IU daily)",
            "More sun exposure may be needed",
        ],
        risk,
    )


VITAMIN_D_LEVELS = TraitDefinition(
    id="vitamin-d-levels",
    title="Vitamin D Levels",
    rsid="rs2282679",
    category=TraitCategory.WELLNESS,
    rules={
        "GG": _rule(
            "You likely maintain healthy vitamin D levels more easily.",
            _HIGH, "GC gene variant affects vitamin D binding protein.",
            [
                "Standard sun exposure and diet may suffice",
                "Still get levels tested annually",
                "Fatty fish and fortified foods are good sources",
            ],
            RiskLevel.OPTIMAL,
        ),
        "GT": _low_vitamin_d(RiskLevel.LOW),
        "TT": _low_vitamin_d(RiskLevel.HIGH),
    },
)

_NIGHT_OWL = _rule(
    "You may naturally lean toward later sleep times (night owl tendency).",
    _MODERATE, "Associated with evening chronotype.",
    [
        "May function better with later schedule",
        "Light exposure in morning helps reset rhythm",
        "Consistent sleep schedule important",
    ],
    RiskLevel.OPTIMAL,
)

SLEEP_DEPTH = TraitDefinition(
    id="sleep-depth",
    title="Sleep Quality",
    rsid="rs1801260",
    category=TraitCategory.WELLNESS,
    rules={
        "AA": _rule(
            "You likely have a natural tendency for earlier sleep-wake cycles.",
            _MODERATE, "CLOCK gene influences circadian rhythm.",
            [
                "Morning person tendencies likely",
                "Align schedule with natural rhythm",
                "Avoid late-night activities when possible",
            ],
            RiskLevel.OPTIMAL,
        ),
        "AG": _NIGHT_OWL,
        "GG": _NIGHT_OWL,
    },
)


def _met_carrier(risk: RiskLevel) -> Interpretation:
    return _rule(
        "You carry the Met variant, which may affect stress resilience and memory.",
        _MODERATE, "Associated with altered BDNF secretion.",
        [
            "Prioritize stress management techniques",
            "Regular exercise especially important",
            "Meditation and mindfulness beneficial",
        ],
        risk,
    )


STRESS_RESPONSE = TraitDefinition(
    id="stress-response",
    title="Stress Response",
    rsid="rs6265",
    category=TraitCategory.WELLNESS,
    rules={
        "CC": _rule(
            "You have the Val/Val variant associated with better stress resilience.",
            _MODERATE, "BDNF Val66Met variant affects brain plasticity.",
            [
                "Generally good stress coping",
                "Exercise enhances BDNF benefits",
                "Maintain healthy lifestyle for best function",
            ],
            RiskLevel.OPTIMAL,
        ),
        "CT": _met_carrier(RiskLevel.OPTIMAL),
        "TT": _met_carrier(RiskLevel.LOW),
    },
)

_LOW_IL6 = _rule(
    "You likely have lower baseline inflammatory markers.",
    _MODERATE, "Associated with reduced IL-6 production.",
    [
        "Lower genetic inflammation risk",
        "Still maintain anti-inflammatory habits",
        "Regular exercise and good sleep help",
    ],
    RiskLevel.OPTIMAL,
)

INFLAMMATION_TENDENCY = TraitDefinition(
    id="inflammation-tendency",
    title="Inflammation Response",
    rsid="rs1800795",
    category=TraitCategory.WELLNESS,
    rules={
        "GG": _rule(
            "You may have higher baseline IL-6 levels, associated with more inflammation.",
            _MODERATE, "IL-6 gene promoter variant affects cytokine production.",
            [
                "Anti-inflammatory diet beneficial",
                "Regular exercise reduces inflammation",
                "Omega-3s and turmeric may help",
            ],
            RiskLevel.HIGH,
        ),
        "CG": _LOW_IL6,
        "CC": _LOW_IL6,
    },
)


# ─── Supplements ─────────────────────────────────────────────────

def _poor_omega3_conversion(risk: RiskLevel) -> Interpretation:
    return _rule(
        "You have reduced ability to convert plant omega-3s to EPA/DHA.",
        _HIGH, "Lower desaturase enzyme activity.",
        [
            "Direct EPA/DHA sources important (fish, algae oil)",
            "Consider fish oil or algae-based supplements",
            "Plant omega-3s alone may not suffice",
        ],
        risk,
    )


OMEGA3_CONVERSION = TraitDefinition(
    id="omega3-conversion",
    title="Omega-3 Conversion",
    rsid="rs174546",
    category=TraitCategory.SUPPLEMENTS,
    rules={
        "CC": _rule(
            "You efficiently convert plant omega-3s (ALA) to active forms (EPA/DHA).",
            _HIGH, "FADS1 gene variant affects fatty acid desaturase activity.",
            [
                "Plant sources like flax and chia beneficial",
                "Fish oil still helpful but less critical",
                "Balanced omega-6 to omega-3 ratio important",
            ],
            RiskLevel.OPTIMAL,
        ),
        "CT": _poor_omega3_conversion(RiskLevel.LOW),
        "TT": _poor_omega3_conversion(RiskLevel.HIGH),
    },
)

FOLATE_METABOLISM = TraitDefinition(
    id="folate-metabolism",
    title="Folate Metabolism (MTHFR)",
    rsid="rs1801133",
    category=TraitCategory.SUPPLEMENTS,
    rules={
        "GG": _rule(
            "You have normal MTHFR enzyme function for folate processing.",
            _HIGH, "C677T variant well-studied for methylation.",
            [
                "Standard folic acid supplementation works",
                "Leafy greens provide good folate",
                "No special methylfolate needed",
            ],
            RiskLevel.OPTIMAL,
        ),
        "AG": _rule(
            "You have one copy of reduced MTHFR function (about 65% activity).",
            _HIGH, "Heterozygous C677T.",
            [
                "Methylfolate may be more effective than folic acid",
                "Eat plenty of leafy greens",
                "B12 also important for methylation",
            ],
            RiskLevel.LOW,
        ),
        "AA": _rule(
            "You have two copies of reduced MTHFR function (about 30% activity).",
            _HIGH, "Homozygous C677T significantly reduces enzyme activity.",
            [
                "Methylfolate (5-MTHF) recommended over folic acid",
                "Consider B-complex with active forms",
                "Get homocysteine levels tested",
            ],
            RiskLevel.HIGH,
        ),
    },
)

IRON_ABSORPTION = TraitDefinition(
    id="iron-absorption",
    title="Iron Absorption (HFE)",
    rsid="rs1800562",
    category=TraitCategory.SUPPLEMENTS,
    rules={
        "GG": _rule(
            "You have normal iron absorption regulation.",
            _HIGH, "HFE C282Y variant affects iron homeostasis.",
            [
                "Standard iron intake guidelines apply",
                "Get ferritin tested if fatigued",
                "Vitamin C enhances iron absorption",
            ],
            RiskLevel.OPTIMAL,
        ),
        "AG": _rule(
            "You carry one copy of a variant associated with increased iron absorption.",
            _HIGH, "Heterozygous for hemochromatosis variant.",
            [
                "Monitor ferritin levels periodically",
                "Avoid unnecessary iron supplements",
                "Blood donation can help if levels high",
            ],
            RiskLevel.LOW,
        ),
        "AA": _rule(
            "You have genetic risk for iron overload (hereditary hemochromatosis).",
            _HIGH, "Homozygous C282Y strongly associated with iron overload.",
            [
                "Get iron panel and ferritin tested",
                "Avoid iron supplements and fortified foods",
                "Regular blood donation often recommended",
                "Consult with doctor about monitoring",
            ],
            RiskLevel.HIGH,
        ),
    },
)


# ─── Registry ────────────────────────────────────────────────────

TRAIT_ORDER: tuple[str, ...] = (
    "lactose-tolerance",
    "caffeine-metabolism",
    "alcohol-flush",
    "bitter-taste",
    "vitamin-b12",
    "muscle-fiber-type",
    "endurance-potential",
    "recovery-speed",
    "achilles-injury-risk",
    "vitamin-d-levels",
    "sleep-depth",
    "stress-response",
    "inflammation-tendency",
    "omega3-conversion",
    "folate-metabolism",
    "iron-absorption",
)

TRAITS: dict[str, TraitDefinition] = {
    trait.id: trait
    for trait in (
        LACTOSE_TOLERANCE,
        CAFFEINE_METABOLISM,
        ALCOHOL_FLUSH,
        BITTER_TASTE,
        VITAMIN_B12,
        MUSCLE_FIBER_TYPE,
        ENDURANCE_POTENTIAL,
        RECOVERY_SPEED,
        ACHILLES_INJURY_RISK,
        VITAMIN_D_LEVELS,
        SLEEP_DEPTH,
        STRESS_RESPONSE,
        INFLAMMATION_TENDENCY,
        OMEGA3_CONVERSION,
        FOLATE_METABOLISM,
        IRON_ABSORPTION,
    )
}

# rsIDs the report reads, in report order (parser debug output tracks these)
TARGET_SNPS: tuple[str, ...] = tuple(TRAITS[t].rsid for t in TRAIT_ORDER)
