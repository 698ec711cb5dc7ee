"""Duplicate and normalisation scan over one batch of records."""

from __future__ import annotations

import logging
from typing import Callable, Iterator, Mapping, Optional, Sequence

from ...config import settings
from ...models.domain import GeoRecord
from ...schemas.cleaning import CleaningReport, CleaningStats, ProgressMessage, WorkerMessage
from ..progress import CancellationToken
from .matching import EXACT_COORD_DEG, coordinates, is_exact_match, is_fuzzy_match
from .normalization import normalize_regions

# ~111 m of latitude
DUPLICATE_WINDOW_DEG = 0.001
PROGRESS_STEPS = 50

Emit = Callable[[WorkerMessage], None]

logger = logging.getLogger(__name__)


def _progress_interval(count: int, floor: int) -> int:
    return max(floor, count // PROGRESS_STEPS)


def _exact_twins(located: Sequence[GeoRecord], index: int, skip: set[str]) -> Iterator[int]:
    """Indexes of records exactly matching ``located[index]`` that are not in ``skip``."""

    record = located[index]
    for step in (-1, 1):
        k = index + step
        while 0 <= k < len(located) and abs(located[k].latitude - record.latitude) < EXACT_COORD_DEG:
            other = located[k]
            if other.id not in skip and is_exact_match(record, other):
                yield k
            k += step


def find_duplicate_groups(
    records: Sequence[GeoRecord],
    *,
    emit: Optional[Emit] = None,
    cancel_token: Optional[CancellationToken] = None,
    progress_floor: Optional[int] = None,
) -> list[list[str]]:
    """Group records that look like the same physical customer.

    Records are stably sorted by (latitude, longitude) and each unconsumed
    record seeds a group from the candidates that follow it within the
    latitude window; exact twins of any member then join the same group. A
    record ends up in at most one group. Records without coordinates never
    match.
    """

    floor = progress_floor if progress_floor is not None else settings.cleaning_progress_floor
    located = [record for record in records if coordinates(record) is not None]
    located.sort(key=lambda record: (record.latitude, record.longitude))

    groups: list[list[str]] = []
    consumed: set[str] = set()
    count = len(located)
    interval = _progress_interval(count, floor)

    for i, seed in enumerate(located):
        if i % interval == 0:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            if emit is not None:
                emit(ProgressMessage(progress=round(i / count * 100)))

        if seed.id in consumed:
            continue

        group = [seed.id]
        joined: list[int] = []
        for j in range(i + 1, count):
            candidate = located[j]
            if candidate.id in consumed:
                continue
            if abs(candidate.latitude - seed.latitude) > DUPLICATE_WINDOW_DEG:
                break

            if is_exact_match(seed, candidate) or is_fuzzy_match(seed, candidate):
                group.append(candidate.id)
                consumed.add(candidate.id)
                joined.append(j)

        if len(group) > 1:
            consumed.add(seed.id)
            # exact twins of a member always share its group
            while joined:
                for k in _exact_twins(located, joined.pop(), consumed):
                    group.append(located[k].id)
                    consumed.add(located[k].id)
                    joined.append(k)
            groups.append(group)
    return groups


def run_cleaning_scan(
    records: Sequence[GeoRecord],
    emit: Optional[Emit] = None,
    *,
    cancel_token: Optional[CancellationToken] = None,
    aliases: Optional[Mapping[str, str]] = None,
    progress_floor: Optional[int] = None,
) -> CleaningReport:
    """Normalise region names, then find duplicate groups.

    Progress messages go to ``emit``; the finished report is returned.
    Raises ``OperationCancelled`` if ``cancel_token`` is cancelled.
    """

    if emit is not None:
        emit(ProgressMessage(progress=0))

    cleaned, edits = normalize_regions(records, aliases)
    groups = find_duplicate_groups(
        cleaned, emit=emit, cancel_token=cancel_token, progress_floor=progress_floor
    )

    if emit is not None:
        emit(ProgressMessage(progress=100))

    report = CleaningReport(
        stats=CleaningStats(
            total_scanned=len(records),
            normalized=len(edits),
            duplicates_found=sum(len(group) for group in groups),
        ),
        duplicate_groups=groups,
        normalized_records=edits,
    )
    logger.info(
        f"Cleaning scan: {report.stats.total_scanned} scanned, {report.stats.normalized} normalized, "
        f"{len(groups)} duplicate groups ({report.stats.duplicates_found} records)"
    )
    return report
