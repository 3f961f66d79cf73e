from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file="sundaystore/.env",
        env_file_encoding="utf-8",
        extra="allow",
    )
    # Application
    APP_NAME: str = "Sunday School Store API"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    DATABASE_URL: str = "sqlite:///./sundaystore.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    SQLITE_BUSY_TIMEOUT: int = 30  # seconds a writer waits for the database lock

    # Points policy defaults (used when a church has no stored config)
    DEFAULT_MAX_TEACHER_ADJUSTMENT: int = 50
    DEFAULT_ATTENDANCE_POINTS_PRESENT: int = 10
    DEFAULT_ATTENDANCE_POINTS_LATE: int = 5
    DEFAULT_ATTENDANCE_POINTS_EXCUSED: int = 0
    DEFAULT_ATTENDANCE_POINTS_ABSENT: int = 0
    DEFAULT_TRIP_PARTICIPATION_POINTS: int = 20

    # Pagination
    LEDGER_PAGE_MAX: int = 100


settings = Settings()
