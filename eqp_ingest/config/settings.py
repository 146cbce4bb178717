from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    debug_mode: bool = False
    log_dir: str = ""

    eqpid: str = ""

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "itm"
    db_username: str = "itm"
    db_password: str = "secret"
    db_pool_max_size: int = 10
    db_pool_timeout_seconds: float = 30.0

    file_encoding: str = "cp949"
    read_timeout_seconds: float = 30.0
    delete_source_on_success: bool = True

    time_sync_provider: str = "offset"
    equipment_timezone: str = "Asia/Seoul"
    reference_timezone: str = "Asia/Seoul"
    clock_offset_seconds: float = 0.0
