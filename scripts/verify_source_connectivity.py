#!/usr/bin/env python3
"""
Check that this host can reach the Oracle source and the dashboard sink.
Run from the project root: python scripts/verify_source_connectivity.py [--json]

Exit 0 = both reachable, exit 1 = a store is missing or failing.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'backend'))


def _probe(name: str, store) -> dict:
    if not store.configured:
        return {'store': name, 'ok': False, 'error': f'{name.upper()}_NOT_CONFIGURED', 'latency_ms': None}
    started = time.perf_counter()
    ok = store.ping()
    return {
        'store': name,
        'ok': bool(ok),
        'error': None if ok else f'{name.upper()}_CONNECTION_FAILED',
        'latency_ms': int((time.perf_counter() - started) * 1000),
    }


def verify_connectivity(json_output: bool = False) -> int:
    from otb_sync.sync.runtime import build_runtime

    runtime = build_runtime()
    try:
        checks = [_probe('source', runtime.source), _probe('sink', runtime.sink)]
    finally:
        runtime.shutdown()
    ok = all(c['ok'] for c in checks)

    if json_output:
        print(json.dumps({'ok': ok, 'checks': checks}, ensure_ascii=False, indent=2))
    else:
        for c in checks:
            if c['ok']:
                print(f"[OK] {c['store']} reachable (latency: {c['latency_ms']} ms)")
            else:
                print(f"[ERROR] {c['store']}: {c['error']}")
        if not ok:
            print("  Copy .env.example to .env and set ORACLE_USER, ORACLE_PASSWORD, ORACLE_CONNECT_STRING, SINK_DATABASE_URL.")
    return 0 if ok else 1


if __name__ == '__main__':
    json_out = '--json' in sys.argv or '-j' in sys.argv
    sys.exit(verify_connectivity(json_output=json_out))
