"""
Supabase client initialization for the review dashboard.
"""

import logging
import os
from typing import Optional

from supabase import Client, create_client
from yarl import URL

logger = logging.getLogger(__name__)


def normalize_supabase_url(url: Optional[str]) -> Optional[str]:
    """Ensure Supabase URL ends with a trailing slash to satisfy the storage client."""
    if not url:
        return None
    return url if url.endswith("/") else f"{url}/"


def get_supabase_client(access_token: Optional[str] = None) -> Optional[Client]:
    """
    Build a Supabase client from SUPABASE_URL / SUPABASE_ANON_KEY.

    When ``access_token`` is given it is sent as the Bearer token so row-level
    security sees the signed-in reviewer; the anon key stays the apiKey header.

    Returns:
        Supabase client instance, or None if credentials are missing
    """
    supabase_url = normalize_supabase_url(os.environ.get("SUPABASE_URL"))
    supabase_key = os.environ.get("SUPABASE_ANON_KEY")
    if not supabase_url or not supabase_key:
        return None

    try:
        supabase: Client = create_client(supabase_url, supabase_key)
    except Exception as e:
        logger.error(f"❌ Error initializing Supabase client: {e}")
        return None

    if access_token:
        supabase.postgrest.auth(access_token)

    # storage3 warns unless the storage URL ends with a slash
    storage_url = str(supabase.storage_url)
    if not storage_url.endswith("/"):
        supabase.storage_url = URL(f"{storage_url}/")

    return supabase
