"""Read-only filtering over ingested file records."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Literal, Optional

from pydantic import BaseModel

from dupedrop.ingestion.models import FileRecord

MIB = 1024 * 1024

DateRange = Literal["", "today", "week", "month"]
SizeRange = Literal["", "small", "medium", "large"]


class FileFilters(BaseModel):
    """Criteria for narrowing a list of records. Empty values match everything.

    Attributes:
        search: Case-insensitive substring matched against name or path.
        type: Media type prefix such as ``image/``.
        date_range: ``today``, ``week`` or ``month``.
        size_range: ``small`` (< 1 MiB), ``medium`` (< 100 MiB) or ``large``.
    """

    search: str = ""
    type: str = ""
    date_range: DateRange = ""
    size_range: SizeRange = ""


def _one_month_before(moment: datetime) -> datetime:
    year, month = (moment.year, moment.month - 1) if moment.month > 1 else (moment.year - 1, 12)
    day = moment.day
    while True:
        try:
            return moment.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1


def matches_search(record: FileRecord, search: str) -> bool:
    needle = search.lower()
    return needle in record.name.lower() or needle in record.path.lower()


def matches_date(record: FileRecord, date_range: DateRange, now: datetime) -> bool:
    if not date_range:
        return True
    modified = datetime.fromtimestamp(record.last_modified / 1000)
    if date_range == "today":
        return modified.date() == now.date()
    if date_range == "week":
        return modified >= now - timedelta(days=7)
    return modified >= _one_month_before(now)


def matches_size(record: FileRecord, size_range: SizeRange) -> bool:
    if size_range == "small":
        return record.size < MIB
    if size_range == "medium":
        return MIB <= record.size < 100 * MIB
    if size_range == "large":
        return record.size >= 100 * MIB
    return True


def filter_records(
    records: Iterable[FileRecord],
    filters: FileFilters,
    now: Optional[datetime] = None,
) -> list[FileRecord]:
    """Return the records matching every criterion in ``filters``, in order.

    Args:
        records: Records to filter; left untouched.
        filters: Criteria to apply.
        now: Reference time for date ranges (local time); defaults to now.

    Returns:
        list[FileRecord]: Matching records.
    """
    reference = now or datetime.now()
    return [
        record
        for record in records
        if matches_search(record, filters.search)
        and record.media_type.startswith(filters.type)
        and matches_date(record, filters.date_range, reference)
        and matches_size(record, filters.size_range)
    ]


__all__ = ["FileFilters", "filter_records"]
