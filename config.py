"""Runtime settings for the export service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_API_URL = "https://mika.mikroskil.ac.id/mika/api/v1/TA-pengajuan-tugas-akhir-detail"
DEFAULT_PORT = 5123
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class Settings:
    """Configuration built once at startup and passed to each component."""

    api_url: str = DEFAULT_API_URL
    token: str = ""
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    export_dir: Path = Path("exports")
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build Settings from environment variables.

    Call dotenv.load_dotenv() first if a .env file should be honoured.

    Args:
        environ: Optional mapping to read instead of os.environ (used by tests).
    """
    env = os.environ if environ is None else environ

    return Settings(
        api_url=env.get("MIKA_URL") or env.get("URL") or DEFAULT_API_URL,
        token=env.get("MIKA_TOKEN", ""),
        host=env.get("HOST", "0.0.0.0"),
        port=int(env.get("PORT", DEFAULT_PORT)),
        export_dir=Path(env.get("EXPORT_DIR", "exports")),
        request_timeout=float(env.get("REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT_SECONDS)),
    )
