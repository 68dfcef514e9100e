"""
Fixed detection rules.

Candidates and limits live here so the detector and the HTTP surface agree on them.
"""

# Default set of candidates, in the order they are tried
DEFAULT_CANDIDATES = (",", ";", ":", "|", "\t")

ENCODING_SAMPLE_BYTES = 65536  # 64KB sample for encoding detection
FALLBACK_ENCODING = "utf-8"

ACCEPTED_SUFFIXES = {".csv", ".tsv", ".txt", ".psv", ".dat"}
