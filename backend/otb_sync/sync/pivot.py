"""
Pivot-to-long reshaping.

The source returns one wide row per (period, category) with one encoded column per
sub-category. Each non-empty cell becomes one flat record; the grand-total row carries
the yearly aggregate instead of data.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from otb_sync.sync.coercion import normalize_row
from otb_sync.sync.encoding import parse_encoded_cell, round_half_up


@dataclass(frozen=True)
class PivotLayout:
    period_column: str = 'stay_ay'
    category_column: str = 'pazar'
    period_field: str = 'month_key'
    category_field: str = 'market'
    subcategory_field: str = 'room_type'
    primary_field: str = 'rn'
    secondary_field: str = 'price'
    sentinel_period: str = 'TOTAL'
    sentinel_category: str = 'GRAND TOTAL'


@dataclass
class PivotResult:
    records: list[dict[str, Any]] = field(default_factory=list)
    sentinel: int | None = None


RN_HEATMAP_LAYOUT = PivotLayout()


def _column_pairs(column_map: Mapping[str, str] | Sequence[tuple[str, str]]) -> list[tuple[str, str]]:
    items = column_map.items() if isinstance(column_map, Mapping) else column_map
    return [(str(key).lower(), str(sub_id)) for key, sub_id in items]


def reshape_pivot(
    rows: Iterable[Mapping[str, Any]],
    column_map: Mapping[str, str] | Sequence[tuple[str, str]],
    layout: PivotLayout = RN_HEATMAP_LAYOUT,
) -> PivotResult:
    columns = _column_pairs(column_map)
    result = PivotResult()
    if not columns:
        return result
    last_column = columns[-1][0]
    period_column = layout.period_column.lower()
    category_column = layout.category_column.lower()

    for raw in rows:
        row = normalize_row(raw)
        period = row.get(period_column)
        category = row.get(category_column)
        if not period or not category:
            continue
        if period == layout.sentinel_period and category == layout.sentinel_category:
            parsed = parse_encoded_cell(row.get(last_column))
            if parsed is not None:
                result.sentinel = round_half_up(parsed.primary)
            continue
        for column, sub_id in columns:
            parsed = parse_encoded_cell(row.get(column))
            if parsed is None:
                continue
            if parsed.primary > 0 or parsed.secondary > 0:
                result.records.append(
                    {
                        layout.period_field: period,
                        layout.category_field: category,
                        layout.subcategory_field: sub_id,
                        layout.primary_field: parsed.primary,
                        layout.secondary_field: parsed.secondary,
                    }
                )
    return result
