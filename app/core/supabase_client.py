import logging
from supabase import create_client, Client
from app.core.config import settings

logger = logging.getLogger(__name__)

_client: Client = None


def get_supabase_client() -> Client:
    """Create (once) and return a Supabase client using values from `settings`.

    Raises a clear RuntimeError if required configuration is missing.
    """
    global _client
    if _client is not None:
        return _client

    supabase_url = settings.SUPABASE_URL
    supabase_key = settings.SUPABASE_SERVICE_ROLE or settings.SUPABASE_ANON_PUBLIC

    if not supabase_url:
        logger.error("SUPABASE_URL is not configured")
        raise RuntimeError("Supabase configuration missing: set SUPABASE_URL environment variable")

    if not supabase_key:
        logger.error("No Supabase key configured (SUPABASE_SERVICE_ROLE or SUPABASE_ANON_PUBLIC)")
        raise RuntimeError("Supabase configuration missing: set SUPABASE_SERVICE_ROLE or SUPABASE_ANON_PUBLIC environment variable")

    # Document uploads need write access to the bucket
    if settings.SUPABASE_SERVICE_ROLE is None:
        logger.warning("SUPABASE_SERVICE_ROLE not set; falling back to SUPABASE_ANON_PUBLIC (reduced privileges)")

    masked_host = supabase_url.split("://")[-1]
    masked_key = f"{supabase_key[:4]}...{supabase_key[-4:]}" if len(supabase_key) > 8 else "<hidden>"
    logger.debug(f"Using Supabase URL host: {masked_host} and key: {masked_key}")

    _client = create_client(supabase_url, supabase_key)
    return _client


# Builds the public read URL for an object in the documents bucket
def public_object_url(key: str) -> str:
    if not key:
        return None
    base = (settings.SUPABASE_URL or "").rstrip("/")
    return f"{base}/storage/v1/object/public/{settings.SUPABASE_BUCKET}/{key}"
