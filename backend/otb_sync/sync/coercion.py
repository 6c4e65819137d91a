from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, NamedTuple


def to_float(value: object) -> float:
    try:
        return float(value or 0)
    except Exception:
        return 0.0


def to_int(value: object, default: int = 0) -> int:
    try:
        return int(float(value))
    except Exception:
        return default


def to_text(value: object, default: str = '') -> str:
    if value is None:
        return default
    text = str(value)
    return text if text else default


def to_optional_text(value: object) -> str | None:
    if value is None:
        return None
    return str(value)


def zero_pad_month(value: object) -> str:
    text = to_text(value).strip()
    if len(text) == 1 and text.isdigit():
        return f'0{text}'
    return text


def normalize_row(row: Mapping[str, Any]) -> dict[str, Any]:
    """Lower-case every column name once, at the source boundary."""
    return {str(k).lower(): v for k, v in row.items()}


class Field(NamedTuple):
    target: str
    source: str
    convert: Callable[[object], Any]


def fields(*specs: tuple[str, str, Callable[[object], Any]]) -> tuple[Field, ...]:
    return tuple(Field(*spec) for spec in specs)


def coerce_row(row: Mapping[str, Any], schema: Iterable[Field]) -> dict[str, Any]:
    normalized = normalize_row(row)
    return {f.target: f.convert(normalized.get(f.source.lower())) for f in schema}


def coerce_rows(rows: Iterable[Mapping[str, Any]], schema: Iterable[Field]) -> list[dict[str, Any]]:
    schema = tuple(schema)
    return [coerce_row(row, schema) for row in rows]
