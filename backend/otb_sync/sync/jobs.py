"""
Sync job catalogue.

A job pairs one SQL file from ``otb_sync/queries`` with a transform and the sink table(s)
it replaces. ``SYNC_JOBS`` is the fixed, ordered list the scheduled run walks through.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable

from otb_sync.db.source import SourceConnection
from otb_sync.sync.coercion import (
    coerce_row,
    coerce_rows,
    fields,
    to_float,
    to_int,
    to_optional_text,
    to_text,
    zero_pad_month,
)
from otb_sync.sync.pivot import reshape_pivot

QUERIES_DIR = Path(__file__).resolve().parents[1] / 'queries'

Rows = list[dict[str, Any]]


@dataclass
class JobOutput:
    payload: Any
    writes: dict[str, Any] = field(default_factory=dict)

    @property
    def row_count(self) -> int:
        total = 0
        for records in self.writes.values():
            if isinstance(records, dict):
                total += 1
            elif records:
                total += len(records)
        return total


@dataclass(frozen=True)
class SyncJob:
    name: str
    query_file: str
    transform: Callable[[Any], JobOutput]
    table: str | None = None
    extract: Callable[[SourceConnection, str], Any] | None = None
    scheduled: bool = True
    path: str | None = None

    @property
    def sql(self) -> str:
        return load_query(self.query_file)


@lru_cache(maxsize=None)
def load_query(filename: str) -> str:
    return (QUERIES_DIR / filename).read_text(encoding='utf-8')


def _first(rows: Rows) -> dict[str, Any]:
    return rows[0] if rows else {}


def _list_job(table: str, schema) -> Callable[[Rows], JobOutput]:
    def _transform(rows: Rows) -> JobOutput:
        records = coerce_rows(rows, schema)
        return JobOutput(payload=records, writes={table: records})

    _transform.__name__ = f'transform_{table}'
    return _transform


def _single_record_job(table: str, schema) -> Callable[[Rows], JobOutput]:
    def _transform(rows: Rows) -> JobOutput:
        record = coerce_row(_first(rows), schema)
        return JobOutput(payload=record, writes={table: record})

    _transform.__name__ = f'transform_{table}'
    return _transform


TODAY_METRICS_FIELDS = fields(
    ('today_reservations', 'today_reservations', to_int),
    ('today_rn', 'today_rn', to_int),
    ('today_revenue', 'today_revenue', to_float),
)

MONTHLY_DATA_FIELDS = fields(
    ('month_num', 'month_num', to_text),
    ('month_label', 'month', to_text),
    ('total_rn', 'total_rn', to_int),
    ('total_revenue', 'total_revenue', to_float),
    ('avg_rate', 'avg_rate', to_float),
    *(
        spec
        for year in (2025, 2024, 2023, 2022)
        for spec in (
            (f'total_rn_{year}', f'total_rn_{year}', to_int),
            (f'total_revenue_{year}', f'total_revenue_{year}', to_float),
            (f'avg_rate_{year}', f'avg_rate_{year}', to_float),
        )
    ),
)

BOB_REVENUE_FIELDS = fields(
    ('month_num', 'month_num', zero_pad_month),
    ('market', 'market', to_optional_text),
    ('year', 'year', to_int),
    ('bob_revenue', 'bob_revenue', to_float),
    ('bob_pax', 'bob_pax', to_int),
    ('bob_rn', 'bob_rn', to_int),
)

TODAY_AGENT_RN_FIELDS = fields(
    ('segment', 'segment', to_text),
    ('rn_count', 'rn_count', to_int),
    ('revenue', 'revenue', to_float),
)

TODAY_RN_BY_MONTH_FIELDS = fields(
    ('month_num', 'month_num', to_text),
    ('total_rn', 'total_rn', to_int),
    ('total_revenue', 'total_revenue', to_float),
    ('adb', 'adb', to_float),
)

TODAY_RN_BY_MONTH_MARKET_FIELDS = fields(
    ('month_num', 'month_num', to_text),
    ('market', 'market', to_text),
    ('rn', 'rn', to_int),
    ('market_total', 'market_total', to_int),
)

DAILY_MARKET_RN_FIELDS = fields(
    ('date_str', 'date_str', to_text),
    ('market', 'market', to_text),
    ('rn_count', 'rn_count', to_int),
    ('market_total', 'market_total', to_int),
)

DAILY_TOTALS_FIELDS = fields(
    ('month_day', 'month_day', to_text),
    ('total_rn', 'total_rn', to_int),
)

BOOKING_PACE_FIELDS = fields(
    ('month_num', 'month_num', to_text),
    ('month_label', 'month', to_text),
    ('last_30_days_rn', 'last_30_days_rn', to_int),
    ('last_15_days_rn', 'last_15_days_rn', to_int),
    ('last_30_days_2025_rn', 'last_30_days_2025_rn', to_int),
    ('last_15_days_2025_rn', 'last_15_days_2025_rn', to_int),
)

ANNUAL_TARGET_FIELDS = fields(
    ('total_revenue_2026', 'total_revenue_2026', to_float),
)

AGENT_PERFORMANCE_FIELDS = fields(
    ('segment', 'segment', to_text),
    ('market', 'market', to_text),
    ('revenue_2026', 'revenue_2026', to_float),
    ('revenue_2025', 'revenue_2025', to_float),
    ('agent_order', 'agent_order', to_int),
)

MARKET_MAINMARKET_FIELDS = fields(
    ('segment', 'segment', to_text),
    *((f'revenue_{year}', f'revenue_{year}', to_float) for year in (2026, 2025, 2024, 2023, 2022)),
    *((f'rn_{year}', f'rn_{year}', to_int) for year in (2026, 2025, 2024, 2023, 2022)),
)


# Pivot column alias -> room type id. The last column is the all-rooms total, which also
# carries the yearly total on the grand-total row.
RN_HEATMAP_COLUMNS = (
    ('BUNGALOV_236', 'BUNGALOV'),
    ('STANDART_LAND_VIEW_57', 'STANDART_LAND_VIEW'),
    ('STANDART_SEA_VIEW_70', 'STANDART_SEA_VIEW'),
    ('BUNGALOV_AILE_133', 'BUNGALOV_AILE_ODASI'),
    ('STANDART_FAMILY_8', 'STANDART_FAMILY_ROOM'),
    ('SUITE_4', 'SUITE'),
    ('TOPLAM_508', 'TUM_ODALAR'),
)


def transform_rn_heatmap(rows: Rows) -> JobOutput:
    result = reshape_pivot(rows, RN_HEATMAP_COLUMNS)
    writes: dict[str, Any] = {'rn_heatmap': result.records}
    if result.sentinel is not None:
        writes['rn_heatmap_meta'] = [{'key': 'year_total_rn', 'value': result.sentinel}]
    return JobOutput(payload={'rows': result.records, 'year_total_rn': result.sentinel}, writes=writes)


def _json_safe(rows: Rows) -> Rows:
    return json.loads(json.dumps(rows, default=str))


def transform_alos_adb_heatmap(rows: Rows) -> JobOutput:
    data = _json_safe(rows)
    return JobOutput(payload=data, writes={'alos_adb_heatmap': [{'data': data}] if data else []})


def transform_bob_revenue(rows: Rows) -> JobOutput:
    records = [
        r for r in coerce_rows(rows, BOB_REVENUE_FIELDS)
        if r['month_num'] and 2022 <= r['year'] <= 2026
    ]
    return JobOutput(payload=records, writes={'bob_revenue_analysis': records})


DAILY_TOTALS_YEARS = ((2025, -12), (2024, -24), (2023, -36), (2022, -48))


def top_markets(rows: Rows) -> list[str]:
    """Distinct, trimmed, non-empty market names in first-seen order."""
    seen: list[str] = []
    for row in rows:
        market = to_text(row.get('market')).strip()
        if market and market not in seen:
            seen.append(market)
    return seen


def build_daily_totals_query(markets: list[str]) -> tuple[str, dict[str, Any]]:
    binds = {f'm{i}': market for i, market in enumerate(markets, start=1)}
    market_filter = ''
    if binds:
        market_filter = ' AND r.mainmarketcode_long IN (' + ', '.join(f':{k}' for k in binds) + ')'
    return load_query('daily_market_rn_totals.sql').format(market_filter=market_filter), binds


def extract_daily_market_rn(conn: SourceConnection, sql: str) -> dict[str, Rows]:
    rows = conn.fetch_all(sql)
    totals_sql, binds = build_daily_totals_query(top_markets(rows))
    out: dict[str, Rows] = {'data2026': rows}
    for year, month_offset in DAILY_TOTALS_YEARS:
        params = {'year_str': str(year), 'month_offset': month_offset, **binds}
        out[f'daily_{year}_totals'] = conn.fetch_all(totals_sql, params)
    return out


def transform_daily_market_rn(extracted: dict[str, Rows]) -> JobOutput:
    rows_2026 = extracted.get('data2026') or []
    totals: Rows = []
    for year, _ in DAILY_TOTALS_YEARS:
        for record in coerce_rows(extracted.get(f'daily_{year}_totals') or [], DAILY_TOTALS_FIELDS):
            totals.append({'year_num': year, **record})
    payload = {key: _json_safe(value) for key, value in extracted.items()}
    return JobOutput(
        payload=payload,
        writes={
            'daily_market_rn': coerce_rows(rows_2026, DAILY_MARKET_RN_FIELDS),
            'daily_market_rn_totals': totals,
        },
    )


def transform_monthly_overview(rows: Rows) -> JobOutput:
    return JobOutput(payload=_json_safe(rows))


SYNC_JOBS: tuple[SyncJob, ...] = (
    SyncJob('today_metrics', 'today_metrics.sql', _single_record_job('today_metrics', TODAY_METRICS_FIELDS),
            table='today_metrics', path='today-metrics'),
    SyncJob('monthly_data', 'monthly_data.sql', _list_job('monthly_data', MONTHLY_DATA_FIELDS),
            table='monthly_data', path='monthly-data'),
    SyncJob('rn_heatmap', 'rn_heatmap.sql', transform_rn_heatmap,
            table='rn_heatmap', path='rn-heatmap'),
    SyncJob('alos_adb_heatmap', 'alos_adb_heatmap.sql', transform_alos_adb_heatmap,
            table='alos_adb_heatmap', path='alos-adb-heatmap'),
    SyncJob('bob_revenue_analysis', 'bob_revenue_analysis.sql', transform_bob_revenue,
            table='bob_revenue_analysis', path='bob-revenue-analysis'),
    SyncJob('today_agent_rn', 'today_agent_rn.sql', _list_job('today_agent_rn', TODAY_AGENT_RN_FIELDS),
            table='today_agent_rn', path='today-agent-rn'),
    SyncJob('today_rn_by_month', 'today_rn_by_month.sql', _list_job('today_rn_by_month', TODAY_RN_BY_MONTH_FIELDS),
            table='today_rn_by_month', path='today-rn-by-month'),
    SyncJob('today_rn_by_month_market', 'today_rn_by_month_market.sql',
            _list_job('today_rn_by_month_market', TODAY_RN_BY_MONTH_MARKET_FIELDS),
            table='today_rn_by_month_market', path='today-rn-by-month-market'),
    SyncJob('daily_market_rn', 'daily_market_rn.sql', transform_daily_market_rn,
            table='daily_market_rn', extract=extract_daily_market_rn, path='daily-market-rn'),
    SyncJob('booking_pace', 'booking_pace.sql', _list_job('booking_pace', BOOKING_PACE_FIELDS),
            table='booking_pace', path='booking-pace'),
    SyncJob('annual_target', 'annual_target.sql', _single_record_job('annual_target', ANNUAL_TARGET_FIELDS),
            table='annual_target', path='annual-target'),
    SyncJob('agent_performance', 'agent_performance.sql', _list_job('agent_performance', AGENT_PERFORMANCE_FIELDS),
            table='agent_performance', path='agent-performance'),
    SyncJob('market_mainmarket', 'market_mainmarket.sql', _list_job('market_mainmarket', MARKET_MAINMARKET_FIELDS),
            table='market_mainmarket', path='market-mainmarket'),
    SyncJob('monthly_overview', 'monthly_overview.sql', transform_monthly_overview,
            scheduled=False, path='data'),
)

JOBS_BY_NAME: dict[str, SyncJob] = {job.name: job for job in SYNC_JOBS}
JOBS_BY_PATH: dict[str, SyncJob] = {job.path: job for job in SYNC_JOBS if job.path}


def scheduled_jobs(jobs: tuple[SyncJob, ...] = SYNC_JOBS) -> tuple[SyncJob, ...]:
    return tuple(job for job in jobs if job.scheduled)
