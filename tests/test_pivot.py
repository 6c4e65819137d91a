import sys
import unittest
from collections import Counter
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'backend'))

from otb_sync.sync.pivot import PivotLayout, reshape_pivot  # noqa: E402

HEATMAP_ROWS = [
    {'STAY_AY': '2026-01', 'PAZAR': 'Local', 'VILLA': '10 / 200.00', 'SUITE': '0 / 0', 'TOTAL': '10 / 200.00'},
    {'stay_ay': '2026-01', 'pazar': 'Germany', 'villa': 'garbage', 'suite': '2 / 0', 'total': '2 / 0'},
    {'Stay_Ay': '2026-02', 'Pazar': 'Local', 'Villa': None, 'Suite': '0 / 150.5', 'Total': '0 / 150.5'},
    {'STAY_AY': 'TOTAL', 'PAZAR': 'GRAND TOTAL', 'VILLA': '10 / 200', 'SUITE': '2 / 150', 'TOTAL': '12,345.5 / 180.2'},
]
COLUMNS = {'VILLA': 'BUNGALOV', 'SUITE': 'SUITE', 'TOTAL': 'TUM_ODALAR'}


def _key(record):
    return tuple(sorted(record.items()))


class ReshapePivotTests(unittest.TestCase):
    def test_single_row_scenario(self):
        result = reshape_pivot(
            [{'STAY_AY': '2026-01', 'PAZAR': 'Local', 'VILLA': '10 / 200.00'}],
            {'VILLA': 'BUNGALOV'},
        )
        self.assertEqual(
            result.records,
            [{'month_key': '2026-01', 'market': 'Local', 'room_type': 'BUNGALOV', 'rn': 10, 'price': 200.00}],
        )
        self.assertIsNone(result.sentinel)

    def test_sentinel_row_is_extracted_not_emitted(self):
        result = reshape_pivot(HEATMAP_ROWS, COLUMNS)
        self.assertEqual(result.sentinel, 12346)
        self.assertFalse(any(r['month_key'] == 'TOTAL' for r in result.records))
        self.assertFalse(any(r['market'] == 'GRAND TOTAL' for r in result.records))

    def test_sentinel_uses_last_declared_column(self):
        columns = [('TOTAL', 'TUM_ODALAR'), ('VILLA', 'BUNGALOV')]
        result = reshape_pivot(HEATMAP_ROWS, columns)
        self.assertEqual(result.sentinel, 10)

    def test_unparseable_sentinel_leaves_it_absent(self):
        rows = [{'STAY_AY': 'TOTAL', 'PAZAR': 'GRAND TOTAL', 'VILLA': 'n/a'}]
        result = reshape_pivot(rows, {'VILLA': 'BUNGALOV'})
        self.assertIsNone(result.sentinel)
        self.assertEqual(result.records, [])

    def test_zero_pairs_and_garbage_are_dropped(self):
        result = reshape_pivot(HEATMAP_ROWS, COLUMNS)
        for record in result.records:
            self.assertTrue(record['rn'] > 0 or record['price'] > 0, record)
        self.assertEqual(len(result.records), 6)

    def test_one_positive_measure_is_enough(self):
        result = reshape_pivot(HEATMAP_ROWS, COLUMNS)
        germany = [r for r in result.records if r['market'] == 'Germany']
        self.assertEqual({r['room_type'] for r in germany}, {'SUITE', 'TUM_ODALAR'})
        february = [r for r in result.records if r['month_key'] == '2026-02']
        self.assertEqual(february[0]['rn'], 0)
        self.assertEqual(february[0]['price'], 150.5)

    def test_column_lookup_is_case_insensitive(self):
        upper = reshape_pivot([HEATMAP_ROWS[0]], {'villa': 'BUNGALOV'})
        lower = reshape_pivot([{k.lower(): v for k, v in HEATMAP_ROWS[0].items()}], {'VILLA': 'BUNGALOV'})
        self.assertEqual(upper.records, lower.records)
        self.assertEqual(len(upper.records), 1)

    def test_records_follow_row_then_column_order(self):
        result = reshape_pivot(HEATMAP_ROWS, COLUMNS)
        self.assertEqual(
            [(r['market'], r['room_type']) for r in result.records[:3]],
            [('Local', 'BUNGALOV'), ('Local', 'TUM_ODALAR'), ('Germany', 'SUITE')],
        )

    def test_reshape_is_repeatable(self):
        first = reshape_pivot(HEATMAP_ROWS, COLUMNS)
        second = reshape_pivot(list(reversed(HEATMAP_ROWS)), COLUMNS)
        self.assertEqual(Counter(map(_key, first.records)), Counter(map(_key, second.records)))
        self.assertEqual(first.sentinel, second.sentinel)

    def test_rows_without_dimensions_are_skipped(self):
        rows = [{'STAY_AY': None, 'PAZAR': 'Local', 'VILLA': '1 / 1'}, {'STAY_AY': '2026-01', 'VILLA': '1 / 1'}]
        self.assertEqual(reshape_pivot(rows, COLUMNS).records, [])

    def test_empty_column_map(self):
        result = reshape_pivot(HEATMAP_ROWS, {})
        self.assertEqual(result.records, [])
        self.assertIsNone(result.sentinel)

    def test_custom_layout(self):
        layout = PivotLayout(
            period_column='period',
            category_column='segment',
            period_field='period',
            category_field='segment',
            subcategory_field='product',
            primary_field='count',
            secondary_field='rate',
            sentinel_period='ALL',
            sentinel_category='ALL',
        )
        rows = [
            {'PERIOD': 'Q1', 'SEGMENT': 'B2B', 'A': '3 / 9.5'},
            {'PERIOD': 'ALL', 'SEGMENT': 'ALL', 'A': '3 / 9.5'},
        ]
        result = reshape_pivot(rows, {'A': 'alpha'}, layout)
        self.assertEqual(result.records, [{'period': 'Q1', 'segment': 'B2B', 'product': 'alpha', 'count': 3, 'rate': 9.5}])
        self.assertEqual(result.sentinel, 3)


if __name__ == '__main__':
    unittest.main()
