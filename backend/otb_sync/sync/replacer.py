"""Full-replace writes: delete every row of a sink table, then insert the new snapshot."""
from __future__ import annotations

import enum
import json
import logging
from typing import Any, Iterable, Mapping

from otb_sync.db.sink import SinkStore

logger = logging.getLogger(__name__)

Records = Mapping[str, Any] | Iterable[Mapping[str, Any]] | None


class ReplaceResult(enum.Enum):
    REPLACED = 'replaced'
    SKIPPED = 'skipped'
    FAILED = 'failed'

    def __bool__(self) -> bool:
        return self is not ReplaceResult.FAILED


def _as_list(records: Records) -> list[dict[str, Any]]:
    if records is None:
        return []
    if isinstance(records, Mapping):
        return [dict(records)]
    return [dict(r) for r in records]


class SinkReplacer:
    """
    Replaces sink tables wholesale. Never raises.

    The delete and the insert run in one transaction under the sink's writer lock for the
    table (see ``SinkStore.replace``), so concurrent writers, in this process or another
    one, cannot interleave and readers never see the table empty. When only the delete
    fails the insert is still attempted on its own.
    """

    def __init__(self, sink: SinkStore) -> None:
        self.sink = sink

    def replace(self, table: str, records: Records, *, quiet: bool = False) -> ReplaceResult:
        try:
            rows = _as_list(records)
        except (TypeError, ValueError) as exc:
            logger.error('sink replace rejected (%s): records are not mappings: %s', table, exc)
            return ReplaceResult.FAILED
        if not self.sink.configured or not rows:
            if not quiet:
                logger.info('sink replace skipped (%s): no data or sink not configured', table)
            return ReplaceResult.SKIPPED

        replaced = self.sink.replace(table, rows)
        if not replaced.ok:
            step = (replaced.data or {}).get('step')
            if step != 'delete':
                return self._failed(table, rows, replaced.error)
            logger.warning('sink delete failed (%s): %s', table, replaced.error)
            inserted = self.sink.insert(table, rows)
            if not inserted.ok:
                return self._failed(table, rows, inserted.error)

        logger.info('sink replaced: %s (%d rows)', table, len(rows))
        return ReplaceResult.REPLACED

    def _failed(self, table: str, rows: list[dict[str, Any]], error: str | None) -> ReplaceResult:
        logger.error('sink insert failed (%s): %s', table, error)
        logger.error('sink insert sample (%s): %s', table, json.dumps(rows[0], default=str, ensure_ascii=False))
        return ReplaceResult.FAILED
