import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()

DEFAULT_CORS_ORIGIN = "http://127.0.0.1:5500"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


class Settings(BaseModel):
    global_discount: float = Field(0.0, ge=0)
    global_tax_rate: float = Field(0.0, ge=0)
    fire_events: bool = False
    admin_api_key: Optional[str] = None
    cors_origins: List[str] = Field(default_factory=lambda: [DEFAULT_CORS_ORIGIN])

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from CART_* variables (and ADMIN_API_KEY / CORS_ORIGINS)."""
        origins = os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGIN)
        return cls(
            global_discount=_env_float("CART_GLOBAL_DISCOUNT", 0.0),
            global_tax_rate=_env_float("CART_GLOBAL_TAX_RATE", 0.0),
            fire_events=_env_bool("CART_FIRE_EVENTS", False),
            admin_api_key=os.getenv("ADMIN_API_KEY"),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )
