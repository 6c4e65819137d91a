import sys
import time
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi import HTTPException
from sqlalchemy.orm import Session

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / 'backend'))

from otb_sync.core.rate_limit import InMemoryRateLimiter  # noqa: E402
from otb_sync.core.security import (  # noqa: E402
    authenticate_user_with_db,
    create_session_token,
    decode_session_token,
    hash_password,
    pwd_context,
    session_user,
    verify_password,
)
from otb_sync.db.session import create_sink_engine  # noqa: E402
from otb_sync.db.sink import SinkStore  # noqa: E402
from otb_sync.models import DashboardUser  # noqa: E402

LEGACY_BCRYPT_HASH = pwd_context.handler('bcrypt').hash('legacy-pass')


class PasswordTests(unittest.TestCase):
    def test_hash_and_verify(self):
        hashed = hash_password('s3cret')
        self.assertTrue(hashed.startswith('$pbkdf2-sha256$'))
        self.assertTrue(verify_password('s3cret', hashed))
        self.assertFalse(verify_password('other', hashed))

    def test_bcrypt_hashes_still_verify(self):
        self.assertTrue(verify_password('legacy-pass', LEGACY_BCRYPT_HASH))

    def test_unknown_hash_format_is_false(self):
        self.assertFalse(verify_password('x', 'plain-text'))


class AuthenticateTests(unittest.TestCase):
    def setUp(self):
        sink = SinkStore(create_sink_engine('sqlite://'))
        sink.create_schema()
        self.db = Session(bind=sink.engine)
        self.db.add(DashboardUser(username='Reception', password_hash=hash_password('pw-1'), display_name=None))
        self.db.commit()

    def tearDown(self):
        self.db.close()

    def test_username_is_case_insensitive(self):
        user = authenticate_user_with_db(self.db, '  reception ', 'pw-1')
        self.assertEqual(user['username'], 'Reception')
        self.assertEqual(user['display_name'], 'Reception')

    def test_wrong_password_or_missing_store(self):
        self.assertIsNone(authenticate_user_with_db(self.db, 'reception', 'pw-2'))
        self.assertIsNone(authenticate_user_with_db(self.db, '', 'pw-1'))
        self.assertIsNone(authenticate_user_with_db(None, 'reception', 'pw-1'))


class SessionTokenTests(unittest.TestCase):
    def test_round_trip(self):
        token = create_session_token({'id': 4, 'username': 'Reception', 'display_name': 'Front'})
        self.assertEqual(session_user(decode_session_token(token)), {'id': 4, 'username': 'Reception', 'display_name': 'Front'})

    def test_expired_token_is_rejected(self):
        token = create_session_token({'id': 1, 'username': 'x'}, expires_minutes=-5)
        with self.assertRaises(HTTPException) as ctx:
            decode_session_token(token)
        self.assertEqual(ctx.exception.status_code, 401)


class RateLimiterTests(unittest.TestCase):
    def test_window(self):
        limiter = InMemoryRateLimiter()
        self.assertTrue(limiter.allow('k', 2, 60))
        self.assertTrue(limiter.allow('k', 2, 60))
        self.assertFalse(limiter.allow('k', 2, 60))
        self.assertTrue(limiter.allow('other', 2, 60))

    def test_retry_after_and_reset(self):
        limiter = InMemoryRateLimiter()
        limiter.hit('k', 1, 30)
        retry_after = limiter.hit('k', 1, 30)
        self.assertTrue(0 < retry_after <= 30)
        limiter.reset()
        self.assertEqual(limiter.hit('k', 1, 30), 0.0)

    def test_old_events_expire(self):
        limiter = InMemoryRateLimiter()
        with patch('otb_sync.core.rate_limit.time.time', return_value=time.time() - 120):
            limiter.hit('k', 1, 60)
        self.assertTrue(limiter.allow('k', 1, 60))


if __name__ == '__main__':
    unittest.main()
