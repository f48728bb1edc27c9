"""Genome Parser: tolerant line scanner for 23andMe / AncestryDNA raw exports.

Invariants:
    - Single pass over the lines; no line is read twice
    - GenotypeMap keys are lowercase rsIDs; a repeated rsID keeps the LAST row
    - Genotypes are normalized: uppercase, single allele doubled, two alleles sorted
    - No-calls ("--", "00", "0", empty) never enter the map
    - Parsing never raises on malformed rows; they are counted as skipped

Design Decisions:
    - Tab split first, whitespace split as fallback: vendors and spreadsheet
      re-saves disagree on delimiters
    - AncestryDNA's split allele1/allele2 columns are joined before normalizing
    - Debug info (samples, target SNP status) is returned, not logged: it can
      contain genotype data, which must never reach the logs
"""

import re
from dataclasses import dataclass, field

from geni.core.domain_types import (
    FileFormat, FORMAT_SNIFF_LINES, DEBUG_SAMPLE_LINES, DEBUG_SAMPLE_SNPS,
)
from geni.core.trait_definitions import TARGET_SNPS

_LINE_BREAK = re.compile(r"\r?\n")
_NO_CALLS = frozenset({"--", "00", "0", ""})
_MIN_FIELDS = 4

WARNING_NO_SNPS = "No valid SNP rows found"
WARNING_NO_TARGETS = "None of the report SNPs were found in this file"


@dataclass
class SNPData:
    """One called genotype row."""
    rsid: str
    chromosome: str
    position: int
    genotype: str


GenotypeMap = dict[str, SNPData]


@dataclass
class TargetStatus:
    """Whether a report SNP was seen, and where."""
    found: bool = False
    genotype: str | None = None
    line: int | None = None  # 1-based


@dataclass
class ParseDebugInfo:
    sample_lines: list[str] = field(default_factory=list)
    sample_snps: list[str] = field(default_factory=list)
    target_snps_status: dict[str, TargetStatus] = field(default_factory=dict)
    total_lines: int = 0
    skipped_lines: int = 0


@dataclass
class ParseResult:
    data: GenotypeMap
    snp_count: int
    warnings: list[str]
    format: FileFormat
    debug: ParseDebugInfo


def normalize_genotype(genotype: str) -> str:
    """Uppercase, double a haploid call, sort a diploid call."""
    upper = genotype.strip().upper()
    if len(upper) == 1:
        return upper + upper
    if len(upper) == 2:
        return "".join(sorted(upper))
    return upper


def detect_format(lines: list[str]) -> FileFormat:
    """Sniff the vendor marker in the file header."""
    for line in lines[:FORMAT_SNIFF_LINES]:
        if "23andMe" in line:
            return FileFormat.TWENTY_THREE_AND_ME
        if "AncestryDNA" in line:
            return FileFormat.ANCESTRY
    return FileFormat.UNKNOWN


def _split_fields(line: str) -> list[str] | None:
    parts = line.split("\t")
    if len(parts) < _MIN_FIELDS:
        parts = line.split()
        if len(parts) < _MIN_FIELDS:
            return None
    return [p.strip() for p in parts]


def _raw_genotype(parts: list[str]) -> str:
    # AncestryDNA: rsid chromosome position allele1 allele2
    if len(parts) >= 5 and len(parts[3]) == 1 and len(parts[4]) == 1:
        return parts[3] + parts[4]
    return parts[3]


def parse_line(line: str) -> SNPData | None:
    """Parse one data row. Returns None for anything that is not a called SNP."""
    if not line or line.startswith("#"):
        return None

    parts = _split_fields(line)
    if parts is None:
        return None

    rsid = parts[0].lower()
    if not (rsid.startswith("rs") or rsid.startswith("i")):
        return None

    try:
        position = int(parts[2])
    except ValueError:
        return None

    genotype = _raw_genotype(parts)
    if genotype in _NO_CALLS:
        return None

    return SNPData(
        rsid=rsid,
        chromosome=parts[1].upper(),
        position=position,
        genotype=normalize_genotype(genotype),
    )


def _scan(text: str, vendor_marker: str | None) -> tuple[ParseResult, bool]:
    """Shared scanner. Returns the result and whether vendor_marker was seen."""
    data: GenotypeMap = {}
    lines = _LINE_BREAK.split(text)
    debug = ParseDebugInfo(
        target_snps_status={rsid: TargetStatus() for rsid in TARGET_SNPS},
        total_lines=len(lines),
    )
    marker_seen = False

    for index, raw in enumerate(lines):
        line = raw.strip()

        if not line:
            debug.skipped_lines += 1
            continue

        if vendor_marker and vendor_marker in line:
            marker_seen = True
            debug.skipped_lines += 1
            continue

        if line.startswith("#"):
            debug.skipped_lines += 1
            continue

        if len(debug.sample_lines) < DEBUG_SAMPLE_LINES:
            debug.sample_lines.append(line)

        snp = parse_line(line)
        if snp is None:
            debug.skipped_lines += 1
            continue

        data[snp.rsid] = snp

        if len(debug.sample_snps) < DEBUG_SAMPLE_SNPS:
            debug.sample_snps.append(snp.rsid)

        if snp.rsid in debug.target_snps_status:
            debug.target_snps_status[snp.rsid] = TargetStatus(
                found=True, genotype=snp.genotype, line=index + 1,
            )

    result = ParseResult(
        data=data,
        snp_count=len(data),
        warnings=_collect_warnings(data, debug),
        format=FileFormat.UNKNOWN,
        debug=debug,
    )
    return result, marker_seen


def _collect_warnings(data: GenotypeMap, debug: ParseDebugInfo) -> list[str]:
    if not data:
        return [WARNING_NO_SNPS]
    if not any(s.found for s in debug.target_snps_status.values()):
        return [WARNING_NO_TARGETS]
    return []


def parse_23andme(text: str) -> ParseResult:
    """Parse a 23andMe export (rsid, chromosome, position, genotype)."""
    result, marker_seen = _scan(text, vendor_marker="23andMe")
    if marker_seen:
        result.format = FileFormat.TWENTY_THREE_AND_ME
    return result


def parse_ancestry(text: str) -> ParseResult:
    """Parse an AncestryDNA export (rsid, chromosome, position, allele1, allele2)."""
    result, _ = _scan(text, vendor_marker=None)
    result.format = FileFormat.ANCESTRY
    return result


def parse_genetic_file(text: str) -> ParseResult:
    """Sniff the vendor and dispatch. Unknown files go through the 23andMe scanner."""
    fmt = detect_format(_LINE_BREAK.split(text, maxsplit=FORMAT_SNIFF_LINES))
    if fmt == FileFormat.ANCESTRY:
        return parse_ancestry(text)
    return parse_23andme(text)


# ─── Lookups ─────────────────────────────────────────────────────

def get_snp(genotypes: GenotypeMap, rsid: str) -> SNPData | None:
    return genotypes.get(rsid.lower())


def has_snp(genotypes: GenotypeMap, rsid: str) -> bool:
    return rsid.lower() in genotypes


def get_genotype(genotypes: GenotypeMap, rsid: str) -> str | None:
    snp = get_snp(genotypes, rsid)
    return snp.genotype if snp else None


def serialize_genotypes(
    genotypes: GenotypeMap, rsids: list[str] | tuple[str, ...],
) -> list[dict[str, str]]:
    """Project the map onto rsids (request order, present entries only)."""
    result = []
    for rsid in rsids:
        genotype = get_genotype(genotypes, rsid)
        if genotype:
            result.append({"rsid": rsid.lower(), "genotype": genotype})
    return result


def deserialize_genotypes(items: list[dict[str, str]]) -> GenotypeMap:
    """Rebuild a map from serialized pairs; chromosome and position are not kept."""
    return {
        item["rsid"]: SNPData(
            rsid=item["rsid"], chromosome="", position=0, genotype=item["genotype"],
        )
        for item in items
    }
