import os
from dataclasses import dataclass
from typing import Optional


def _float_or_none(val: Optional[str]) -> Optional[float]:
    if val is None or not val.strip():
        return None
    try:
        return float(val)
    except ValueError:
        return None


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration, read from environment variables.

    Fields:
      - api_url: base url of the storefront api, e.g. http://localhost:8000/api
      - api_timeout: http timeout in seconds, None means wait forever
      - db_path: sqlite file used by the api server
      - allowed_origin: the single frontend origin allowed by CORS
      - host / port: where the api server binds
      - debug: verbose logging
    """

    api_url: str = "http://localhost:8000/api"
    api_timeout: Optional[float] = None
    db_path: str = "data/medishop.sqlite"
    allowed_origin: str = "http://localhost:5173"
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        port = os.getenv("MEDISHOP_PORT", "")
        return cls(
            api_url=os.getenv("MEDISHOP_API_URL", defaults.api_url).rstrip("/"),
            api_timeout=_float_or_none(os.getenv("MEDISHOP_API_TIMEOUT")),
            db_path=os.getenv("MEDISHOP_DB_PATH", defaults.db_path),
            allowed_origin=os.getenv(
                "MEDISHOP_ALLOWED_ORIGIN", defaults.allowed_origin
            ),
            host=os.getenv("MEDISHOP_HOST", defaults.host),
            port=int(port) if port.isdigit() else defaults.port,
            debug=bool(os.getenv("DEBUG")),
        )


def get_settings() -> Settings:
    return Settings.from_env()
