from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    app_name: str = 'otb-sync'
    app_env: str = Field(default='dev', alias='APP_ENV')
    app_port: int = Field(default=3001, alias='APP_PORT')
    cors_origins: str = Field(default='*', alias='CORS_ORIGINS')

    oracle_user: str = Field(default='', alias='ORACLE_USER')
    oracle_password: str = Field(default='', alias='ORACLE_PASSWORD')
    oracle_connect_string: str = Field(default='', alias='ORACLE_CONNECT_STRING')
    source_pool_size: int = Field(default=4, alias='SOURCE_POOL_SIZE')
    source_call_timeout_seconds: int = Field(default=300, alias='SOURCE_CALL_TIMEOUT_SECONDS')

    # Postgres behind the dashboard (e.g. the Supabase connection string).
    # Empty means "sink not configured": every sink operation degrades to a no-op.
    sink_database_url: str = Field(default='', alias='SINK_DATABASE_URL')
    sink_pool_size: int = Field(default=5, alias='SINK_POOL_SIZE')

    session_secret: str = Field(default='change_me_session_secret', alias='SESSION_SECRET')
    session_algorithm: str = Field(default='HS256', alias='SESSION_ALGORITHM')
    session_max_age_minutes: int = Field(default=24 * 60, alias='SESSION_MAX_AGE_MINUTES')
    session_cookie_name: str = Field(default='otb_session', alias='SESSION_COOKIE_NAME')
    login_rate_limit: int = Field(default=10, alias='LOGIN_RATE_LIMIT')
    login_rate_window_seconds: int = Field(default=60, alias='LOGIN_RATE_WINDOW_SECONDS')

    sync_interval_minutes: int = Field(default=30, alias='SYNC_INTERVAL_MINUTES')
    sync_start_hour: int = Field(default=9, alias='SYNC_START_HOUR')
    sync_end_hour: int = Field(default=18, alias='SYNC_END_HOUR')
    sync_on_start: bool = Field(default=True, alias='SYNC_ON_START')

    @property
    def source_configured(self) -> bool:
        return bool(self.oracle_user.strip() and self.oracle_connect_string.strip())

    @property
    def sink_configured(self) -> bool:
        return bool(self.sink_database_url.strip())


settings = Settings()
