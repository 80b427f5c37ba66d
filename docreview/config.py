from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Ensure environment variables from the repository root .env are available
# regardless of the working directory used to start the process.
ROOT_DIR = Path(__file__).resolve().parents[1]
load_dotenv(ROOT_DIR / ".env")


class Settings(BaseSettings):
  backend_url: str = Field(default="http://127.0.0.1:8000", alias="BACKEND_URL")
  process_page_url: str = Field(default="http://127.0.0.1:8080/api/process-page", alias="PROCESS_PAGE_URL")
  extraction_api_url: str = Field(default="http://127.0.0.1:8000/extract/", alias="EXTRACTION_API_URL")
  data_dir: str = Field(default="backend_data", alias="DATA_DIR")

  page_timeout_seconds: float = Field(default=900.0, alias="PAGE_TIMEOUT_SECONDS")
  upstream_timeout_seconds: float = Field(default=300.0, alias="UPSTREAM_TIMEOUT_SECONDS")

  status_poll_interval_seconds: float = Field(default=2.0, alias="STATUS_POLL_INTERVAL_SECONDS")
  stale_no_progress_seconds: float = Field(default=120.0, alias="STALE_NO_PROGRESS_SECONDS")
  stale_idle_seconds: float = Field(default=60.0, alias="STALE_IDLE_SECONDS")
  session_timeout_seconds: float = Field(default=600.0, alias="SESSION_TIMEOUT_SECONDS")
  session_max_age_seconds: float = Field(default=3600.0, alias="SESSION_MAX_AGE_SECONDS")

  batch_pause_seconds: float = Field(default=0.3, alias="BATCH_PAUSE_SECONDS")
  batch_error_backoff_seconds: float = Field(default=2.0, alias="BATCH_ERROR_BACKOFF_SECONDS")
  retry_delay_seconds: float = Field(default=0.5, alias="RETRY_DELAY_SECONDS")
  completion_grace_seconds: float = Field(default=1.0, alias="COMPLETION_GRACE_SECONDS")
  unavailable_grace_seconds: float = Field(default=2.0, alias="UNAVAILABLE_GRACE_SECONDS")
  empty_batch_grace_seconds: float = Field(default=0.5, alias="EMPTY_BATCH_GRACE_SECONDS")
  batch_retention_seconds: float = Field(default=3600.0, alias="BATCH_RETENTION_SECONDS")

  def ensure_backend_url(self) -> str:
    url = (self.backend_url or "").strip()
    if not url:
        return ""
    return url.rstrip("/")

  class Config:
    case_sensitive = False


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  return Settings()  # type: ignore[arg-type]
