from dataclasses import dataclass
import os

from dotenv import load_dotenv

from .paths import ROOT

load_dotenv(ROOT / ".env", override=False)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    environment: str = os.getenv("ENVIRONMENT", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    submissions_file: str = os.getenv("SUBMISSIONS_FILE", "submissions.csv")
    review_repo: str = os.getenv("REVIEW_REPO", "openjournals/joss-reviews")
    github_token: str = os.getenv("GITHUB_TOKEN", "")
    openalex_mailto: str = os.getenv("OPENALEX_MAILTO", "")
    fetch_remote: bool = _env_flag("FETCH_REMOTE")
    http_timeout: float = float(os.getenv("HTTP_TIMEOUT", "30"))

    trend_window_days: float = float(os.getenv("TREND_WINDOW_DAYS", "180"))
    figure_dpi: int = int(os.getenv("FIGURE_DPI", "150"))


settings = Settings()

__all__ = ["Settings", "settings"]
