"""Root conftest: shared test configuration."""

import os

import pytest

# Tests never talk to real providers or use a production-strength KDF
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production-use-0123456789")
os.environ.setdefault("KDF_ITERATIONS", "1000")
os.environ.setdefault("RESEND_API_KEY", "re_test_fake_key")
os.environ.setdefault("POLAR_ACCESS_TOKEN", "polar_test_fake_token")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)

TWENTY_THREE_AND_ME_SAMPLE = "\n".join([
    "# This data file generated by 23andMe at: Mon Jan 01 00:00:00 2024",
    "#",
    "# rsid\tchromosome\tposition\tgenotype",
    "rs4988235\t2\t136608646\tAG",
    "rs762551\t15\t75041917\tCA",
    "rs671\t12\t112241766\tGG",
    "rs713598\t7\t141673345\tGC",
    "rs1815739\t11\t66328095\tTC",
    "rs9999999\t1\t12345\t--",
    "i3000001\tMT\t100\tA",
    "rs6265\t11\t27679916\tCT",
    "",
])

ANCESTRY_SAMPLE = "\r\n".join([
    "#AncestryDNA raw data download",
    "#This file was generated by AncestryDNA",
    "rsid\tchromosome\tposition\tallele1\tallele2",
    "rs4988235\t2\t136608646\tG\tG",
    "rs1801133\t1\t11856378\tA\tG",
    "rs1800562\t6\t26093141\t0\t0",
    "",
])


@pytest.fixture
def twenty_three_and_me_text() -> str:
    """Small 23andMe export: 7 called SNPs, 6 of them report SNPs."""
    return TWENTY_THREE_AND_ME_SAMPLE


@pytest.fixture
def ancestry_text() -> str:
    """Small AncestryDNA export (CRLF line endings, split allele columns)."""
    return ANCESTRY_SAMPLE
