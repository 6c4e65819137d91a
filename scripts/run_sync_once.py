#!/usr/bin/env python3
"""
Run the sync catalogue once from the command line and print the outcomes as JSON.

Usage:
  python scripts/run_sync_once.py                 # honours the operating-hours window
  python scripts/run_sync_once.py --force         # ignores the window
  python scripts/run_sync_once.py --job rn_heatmap
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'backend'))


def main() -> int:
    parser = argparse.ArgumentParser(description='Run the source-to-sink sync once.')
    parser.add_argument('--force', action='store_true', help='ignore SYNC_START_HOUR/SYNC_END_HOUR')
    parser.add_argument('--job', action='append', default=[], help='only this job (repeatable)')
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s %(message)s')

    from otb_sync.sync.orchestrator import UnknownJobError
    from otb_sync.sync.runtime import build_runtime

    runtime = build_runtime()
    try:
        if args.job:
            outcomes = []
            for name in args.job:
                try:
                    job = runtime.orchestrator.get_job(name)
                except UnknownJobError:
                    parser.error(f'unknown job: {name}')
                _, outcome = runtime.orchestrator.run_job(job, trigger='cli')
                outcomes.append(asdict(outcome))
            report = {'outcomes': outcomes, 'failed': [o['name'] for o in outcomes if not o['ok']]}
        else:
            summary = runtime.orchestrator.run_all(force=args.force, trigger='cli')
            report = {**asdict(summary), 'failed': summary.failed}
    finally:
        runtime.shutdown()

    print(json.dumps(report, ensure_ascii=False, indent=2, default=str))
    return 1 if report['failed'] else 0


if __name__ == '__main__':
    sys.exit(main())
