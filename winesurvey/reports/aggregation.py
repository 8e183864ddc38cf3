# -*- coding: utf-8 -*-
"""Group-and-count over response records.

Ordering: descending count; ties keep the order in which each key was
first seen. Percentages use ``total`` (default: every record passed in) as
the denominator and are rounded to one decimal place.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..questions import as_list
from .segments import matches_all

NOT_INFORMED = "Não informado"

Record = Dict[str, Any]
Selector = Callable[[Record], Any]


@dataclass(frozen=True)
class AggregationBucket:
    key: str
    count: int
    percentage: float

    def to_dict(self) -> dict:
        return {"key": self.key, "count": self.count, "percentage": self.percentage}


def percent(count: int, total: int) -> float:
    if not total:
        return 0.0
    return round(count / total * 100, 1)


def _rank(counts: Dict[str, int], total: int) -> List[AggregationBucket]:
    # sorted() is stable, so equal counts keep first-seen order
    ordered = sorted(counts.items(), key=lambda kv: -kv[1])
    return [AggregationBucket(k, c, percent(c, total)) for k, c in ordered]


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def group_and_count(records: Sequence[Record], selector: Selector,
                    total: Optional[int] = None,
                    missing_label: Optional[str] = NOT_INFORMED) -> List[AggregationBucket]:
    """Count records per selected value.

    Missing values are counted under ``missing_label``; pass None to drop
    them (the denominator still covers every record in that case).
    """
    if not records:
        return []
    counts: Dict[str, int] = {}
    for record in records:
        value = selector(record)
        if _is_missing(value):
            if missing_label is None:
                continue
            value = missing_label
        key = str(value)
        counts[key] = counts.get(key, 0) + 1
    return _rank(counts, len(records) if total is None else total)


def group_and_count_multi(records: Sequence[Record], selector: Selector,
                          total: Optional[int] = None) -> List[AggregationBucket]:
    """Like group_and_count for list-valued fields.

    A record adds one to every distinct value in its list, so percentages
    are "share of respondents" and may add up to more than 100.
    """
    if not records:
        return []
    counts: Dict[str, int] = {}
    for record in records:
        values = as_list(selector(record))
        seen = set()
        for value in values:
            if _is_missing(value) or value in seen:
                continue
            seen.add(value)
            key = str(value)
            counts[key] = counts.get(key, 0) + 1
    return _rank(counts, len(records) if total is None else total)


def buckets_from_counts(pairs: Iterable[Tuple[Any, int]], total: int,
                        missing_label: str = NOT_INFORMED) -> List[AggregationBucket]:
    """Rank (value, count) rows coming from a SQL GROUP BY."""
    counts: Dict[str, int] = {}
    for value, count in pairs:
        key = missing_label if _is_missing(value) else str(value)
        counts[key] = counts.get(key, 0) + int(count)
    return _rank(counts, total)


def filter_segment(records: Iterable[Record], *rule_names: str) -> List[Record]:
    """Records that satisfy every named segment rule (logical AND)."""
    return [r for r in records if matches_all(r, rule_names)]


def top(buckets: Sequence[AggregationBucket], n: int) -> List[AggregationBucket]:
    return list(buckets[:n])


def bucket_map(buckets: Iterable[AggregationBucket]) -> Dict[str, int]:
    return {b.key: b.count for b in buckets}


def field(attr: str) -> Selector:
    return lambda record: record.get(attr)
