"""Record deduplication and normalisation."""

from .matching import distance_m, is_duplicate, is_exact_match, is_fuzzy_match, levenshtein
from .normalization import CITY_ALIASES, canonical_region, normalize_regions
from .scanner import find_duplicate_groups, run_cleaning_scan
from .worker import CleaningJob, CleaningWorker

__all__ = [
    "CITY_ALIASES",
    "CleaningJob",
    "CleaningWorker",
    "canonical_region",
    "distance_m",
    "find_duplicate_groups",
    "is_duplicate",
    "is_exact_match",
    "is_fuzzy_match",
    "levenshtein",
    "normalize_regions",
    "run_cleaning_scan",
]
