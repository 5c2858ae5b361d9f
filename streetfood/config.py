"""
config.py – Settings đọc từ environment (.env được load ở main.py).
"""
import os
from dataclasses import dataclass, field
from typing import Optional


def _split_csv(raw: str) -> list[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


@dataclass(frozen=True)
class Settings:
    database_url:   str = "sqlite:///./data/streetfood.db"
    auth_secret:    str = ""
    auth_algorithm: str = "HS256"
    auth_audience:  Optional[str] = None
    auth_issuer:    Optional[str] = None
    cors_origins:   list[str] = field(default_factory=lambda: ["*"])
    log_level:      str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            auth_secret=os.getenv("AUTH_SECRET", ""),
            auth_algorithm=os.getenv("AUTH_ALGORITHM", cls.auth_algorithm),
            auth_audience=os.getenv("AUTH_AUDIENCE") or None,
            auth_issuer=os.getenv("AUTH_ISSUER") or None,
            cors_origins=_split_csv(os.getenv("CORS_ORIGINS", "*")),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )
