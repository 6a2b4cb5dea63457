from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional


def _csv_env(name: str, default: str) -> List[str]:
    raw = os.environ.get(name) or default
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


class Settings:
    """Centralized configuration for the food dataset backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent

        # ---- Dataset storage ----
        self.storage_backend: str = (
            os.environ.get("HARUFIT_STORAGE_BACKEND") or "local"
        ).strip().lower()
        self.food_data_dir: Path = Path(
            os.environ.get("HARUFIT_FOOD_DATA_DIR") or (repo_root / "data" / "foodData")
        ).expanduser()
        self.supabase_url: Optional[str] = os.environ.get("SUPABASE_URL") or os.environ.get(
            "NEXT_PUBLIC_SUPABASE_URL"
        )
        # The service role key is preferred; the anon key only works for public buckets.
        self.supabase_key: Optional[str] = os.environ.get(
            "SUPABASE_SERVICE_ROLE_KEY"
        ) or os.environ.get("NEXT_PUBLIC_SUPABASE_ANON_KEY")
        self.storage_bucket: str = os.environ.get("HARUFIT_STORAGE_BUCKET") or "food-json"
        self.storage_timeout: float = float(os.environ.get("HARUFIT_STORAGE_TIMEOUT") or "60")
        self.stream_chunk_bytes: int = int(
            os.environ.get("HARUFIT_STREAM_CHUNK_BYTES") or str(256 * 1024)
        )

        # ---- Languages ----
        self.supported_languages: List[str] = _csv_env(
            "HARUFIT_FOOD_LANGS", "kr,jp,zh,us,au,ca,fr"
        )
        # Large datasets ship as gzip JSON parts instead of a single SQLite file.
        self.json_languages: List[str] = _csv_env("HARUFIT_JSON_LANGS", "us,fr,kr")

        # ---- Search ----
        self.search_default_limit: int = int(
            os.environ.get("HARUFIT_SEARCH_DEFAULT_LIMIT") or "30"
        )
        self.search_max_limit: int = int(os.environ.get("HARUFIT_SEARCH_MAX_LIMIT") or "100")

        # ---- Open Food Facts lookup ----
        self.openfoodfacts_url: str = (
            os.environ.get("OPENFOODFACTS_URL") or "https://world.openfoodfacts.org/cgi/search.pl"
        )
        self.openfoodfacts_timeout: float = float(
            os.environ.get("OPENFOODFACTS_TIMEOUT") or "15"
        )
        self.user_agent: str = os.environ.get("HARUFIT_USER_AGENT") or "HaruFit/1.0"

        # ---- Server ----
        self.host: str = os.environ.get("HARUFIT_HOST") or os.environ.get("HOST") or "127.0.0.1"
        self.port: int = int(os.environ.get("HARUFIT_PORT") or os.environ.get("PORT") or "8000")
        self.log_level: str = (os.environ.get("HARUFIT_LOG_LEVEL") or "info").lower()

        cors = os.environ.get("HARUFIT_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]


settings = Settings()
