from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from otb_sync.core.config import Settings, settings


def create_sink_engine(database_url: str, pool_size: int = 5) -> Engine:
    is_sqlite = database_url.startswith('sqlite')
    engine_kwargs: dict = {'pool_pre_ping': True}
    if is_sqlite:
        engine_kwargs['connect_args'] = {'check_same_thread': False, 'timeout': 30}
        if database_url in ('sqlite://', 'sqlite:///:memory:'):
            engine_kwargs['poolclass'] = StaticPool
    else:
        engine_kwargs.update(
            {
                'pool_size': max(1, int(pool_size or 5)),
                'max_overflow': 5,
                'pool_timeout': 30,
                'pool_recycle': 1800,
            }
        )
    return create_engine(database_url, **engine_kwargs)


def create_source_engine(cfg: Settings = settings) -> Engine:
    """Pooled Oracle engine (python-oracledb thin mode) with a per-call timeout on every connection."""
    engine = create_engine(
        'oracle+oracledb://',
        connect_args={
            'user': cfg.oracle_user,
            'password': cfg.oracle_password,
            'dsn': cfg.oracle_connect_string,
        },
        pool_pre_ping=True,
        pool_size=max(1, int(cfg.source_pool_size or 4)),
        max_overflow=2,
        pool_recycle=1800,
    )
    timeout_ms = max(0, int(cfg.source_call_timeout_seconds or 0)) * 1000

    @event.listens_for(engine, 'connect')
    def _oracle_call_timeout(dbapi_connection, _connection_record):
        # milliseconds, 0 disables the timeout
        dbapi_connection.call_timeout = timeout_ms

    return engine
