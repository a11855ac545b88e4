import os
from dataclasses import dataclass
from functools import lru_cache

DEFAULT_RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_EMAIL_FROM = "Dr.WinMac Scanner <scanner@drwinmac.tech>"
DEFAULT_BUSINESS_NAME = "Dr.WinMac Tech Solutions"

EMAIL_BACKENDS = {"resend", "log"}
OPEN_CORS_ENVS = {"dev", "local", "test"}


@dataclass(frozen=True)
class Config:
    env: str
    log_level: str
    email_backend: str
    resend_api_key: str | None
    resend_api_url: str
    email_from: str
    advisor_email: str
    email_timeout_s: float
    business_name: str
    cors_allow_origins: tuple[str, ...] = ()
    version: str = "dev"
    commit: str = "unknown"

    @classmethod
    def from_env(cls) -> "Config":
        missing: list[str] = []

        def require(name: str) -> str:
            value = os.getenv(name)
            if value is None or value.strip() == "":
                missing.append(name)
                return ""
            return value.strip()

        env = require("ENV")
        log_level = require("LOG_LEVEL")
        advisor_email = require("ADVISOR_EMAIL")

        email_backend = os.getenv("EMAIL_BACKEND", "log").strip().lower()
        if email_backend not in EMAIL_BACKENDS:
            allowed = ", ".join(sorted(EMAIL_BACKENDS))
            raise ValueError(f"EMAIL_BACKEND must be one of: {allowed}")

        resend_api_key = os.getenv("RESEND_API_KEY") or None
        if email_backend == "resend" and not resend_api_key:
            missing.append("RESEND_API_KEY")

        resend_api_url = os.getenv("RESEND_API_URL", DEFAULT_RESEND_API_URL).strip()
        email_from = os.getenv("EMAIL_FROM", DEFAULT_EMAIL_FROM).strip()
        email_timeout_s = _parse_float(os.getenv("EMAIL_TIMEOUT_S", "10"))
        if email_timeout_s <= 0:
            raise ValueError("EMAIL_TIMEOUT_S must be positive")
        business_name = os.getenv("BUSINESS_NAME", DEFAULT_BUSINESS_NAME).strip()

        if missing:
            missing_str = ", ".join(missing)
            raise ValueError(f"Missing required env vars: {missing_str}")

        return cls(
            env=env,
            log_level=log_level,
            email_backend=email_backend,
            resend_api_key=resend_api_key,
            resend_api_url=resend_api_url,
            email_from=email_from,
            advisor_email=advisor_email,
            email_timeout_s=email_timeout_s,
            business_name=business_name or DEFAULT_BUSINESS_NAME,
            cors_allow_origins=cors_origins_from_env(),
            version=os.getenv("MACSCAN_VERSION") or "dev",
            commit=os.getenv("GIT_COMMIT") or "unknown",
        )


def parse_cors_origins(raw: str | None, env: str | None) -> tuple[str, ...]:
    if raw and raw.strip():
        return tuple(origin.strip() for origin in raw.split(",") if origin.strip())
    if (env or "").strip().lower() in OPEN_CORS_ENVS:
        return ("*",)
    return ()


def cors_origins_from_env() -> tuple[str, ...]:
    # Independent of the required vars checked by Config.from_env.
    return parse_cors_origins(os.getenv("CORS_ALLOW_ORIGINS"), os.getenv("ENV"))


def _parse_float(value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ValueError(f"Invalid float value: {value}") from exc


@lru_cache(maxsize=1)
def get_config() -> Config:
    return Config.from_env()
