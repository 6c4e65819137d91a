"""
Create or update dashboard users in the sink ``users`` table.

DASHBOARD_BOOTSTRAP_USERS='[{"username": "reception", "password": "...", "display_name": "Reception"}]'
"""
import json
import os
import sys
from pathlib import Path


def parse_users(raw: str | None):
    if not raw:
        return []
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return []
    if not isinstance(payload, list):
        return []
    users = []
    for item in payload:
        if not isinstance(item, dict):
            continue
        username = str(item.get('username', '')).strip()
        password = str(item.get('password', '')).strip()
        display_name = str(item.get('display_name', '')).strip() or None
        if username and password:
            users.append({'username': username, 'password': password, 'display_name': display_name})
    return users


def main():
    root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(root / 'backend'))

    from sqlalchemy import func
    from sqlalchemy.orm import Session

    from otb_sync.core.security import hash_password
    from otb_sync.models import DashboardUser
    from otb_sync.sync.runtime import build_runtime

    users = parse_users(os.getenv('DASHBOARD_BOOTSTRAP_USERS'))
    if not users:
        print(json.dumps({'ok': False, 'error': 'DASHBOARD_BOOTSTRAP_USERS is empty or invalid'}))
        return 1

    runtime = build_runtime()
    if not runtime.sink.configured:
        print(json.dumps({'ok': False, 'error': 'SINK_DATABASE_URL not configured'}))
        return 1
    runtime.sink.create_schema()

    created = 0
    updated = 0
    with Session(bind=runtime.sink.engine) as db:
        for user in users:
            row = (
                db.query(DashboardUser)
                .filter(func.lower(DashboardUser.username) == user['username'].lower())
                .first()
            )
            if row:
                row.password_hash = hash_password(user['password'])
                row.display_name = user['display_name'] or row.display_name
                row.is_active = True
                updated += 1
            else:
                db.add(
                    DashboardUser(
                        username=user['username'],
                        password_hash=hash_password(user['password']),
                        display_name=user['display_name'],
                        is_active=True,
                    )
                )
                created += 1
        db.commit()
    runtime.shutdown()

    print(json.dumps({'ok': True, 'created': created, 'updated': updated, 'total': len(users)}, ensure_ascii=False))
    return 0


if __name__ == '__main__':
    sys.exit(main())
