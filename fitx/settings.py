from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    data_dir: Path = Path("./fitx-data")  # app-private document storage
    db_subdir: str = "SQLite"
    db_name: str = "fitx.db"
    cache_dir: Path = Path("./fitx-data/cache")  # export staging, drive downloads
    backup_dir: Path = Path("./fitx-data/backups")  # automatic backups land here
    backup_prefix: str = "FitX_Backup"
    backup_mime_type: str = "application/x-sqlite3"
    drive_api_url: str = "https://www.googleapis.com/drive/v3"
    drive_upload_url: str = "https://www.googleapis.com/upload/drive/v3"
    drive_timeout: float = 30.0
    auto_backup_minutes: int = 0  # 0 disables the scheduler job
    log_level: str = "INFO"
    echo_sql: bool = False

    class Config:
        env_file = ".env"
        env_prefix = "FITX_"
        case_sensitive = False

    @property
    def db_dir(self) -> Path:
        return self.data_dir / self.db_subdir

    @property
    def db_path(self) -> Path:
        return self.db_dir / self.db_name


@lru_cache
def get_settings() -> Settings:
    return Settings()
