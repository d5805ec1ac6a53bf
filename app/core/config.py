import os
import logging
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    PROJECT_NAME: str = "Microfinance Loan Intake"
    MONGODB_URI: str = os.getenv("MONGODB_URI")
    MONGODB_DB_NAME: str = os.getenv("MONGODB_DB_NAME")
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY")
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRE_MINUTES", "720"))
    CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:5173")
    SUPABASE_URL: str = os.getenv("SUPABASE_URL")
    SUPABASE_SERVICE_ROLE: str = os.getenv("SUPABASE_SERVICE_ROLE")
    SUPABASE_ANON_PUBLIC: str = os.getenv("SUPABASE_ANON_PUBLIC")
    SUPABASE_BUCKET: str = os.getenv("SUPABASE_BUCKET", "loan-documents")
    # Per-file cap for document parts on the loan upload endpoint
    MAX_UPLOAD_SIZE: int = int(os.getenv("MAX_UPLOAD_SIZE", str(25 * 1024 * 1024)))
    NORMALIZE_UPLOADS: bool = _env_bool("NORMALIZE_UPLOADS", False)
    SUCCESS_REDIRECT_DELAY_SECONDS: float = float(os.getenv("SUCCESS_REDIRECT_DELAY_SECONDS", "15"))

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()


def _mask_secret(val: str) -> str:
    if not val:
        return "<missing>"
    if len(val) <= 8:
        return "*" * len(val)
    return f"{val[:4]}...{val[-4:]}"


def _mask_url(url: str) -> str:
    # Keep scheme and host, but strip credentials and path
    try:
        from urllib.parse import urlparse
        p = urlparse(url)
        netloc = p.hostname or ""
        if p.port:
            netloc = f"{netloc}:{p.port}"
        return f"{p.scheme}://{netloc}"
    except Exception:
        return _mask_secret(url)


if settings.JWT_SECRET_KEY:
    logger.debug(
        "Loaded Supabase settings (redacted): %s",
        {
            "SUPABASE_URL": _mask_url(settings.SUPABASE_URL) if settings.SUPABASE_URL else None,
            "SUPABASE_SERVICE_ROLE": _mask_secret(settings.SUPABASE_SERVICE_ROLE),
            "SUPABASE_BUCKET": settings.SUPABASE_BUCKET,
        },
    )
    logger.debug("Loaded JWT_SECRET_KEY: %s", _mask_secret(settings.JWT_SECRET_KEY))
else:
    logger.warning("JWT_SECRET_KEY is missing or empty!")
