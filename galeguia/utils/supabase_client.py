"""
Supabase client construction.

Every request gets its own client so a session established by one caller
(sign-in, or a forwarded access token) never leaks into another request.
"""
import logging
from typing import Optional

from supabase import Client, ClientOptions, create_client

from ..config import Config

logger = logging.getLogger(__name__)


def create_user_client(access_token: Optional[str], refresh_token: Optional[str] = None) -> Client:
    """
    Build a client whose table, storage, RPC and function calls carry the
    caller's JWT.

    Without an access token the client only holds the public (anon) key.
    """
    try:
        client = create_client(
            Config.SUPABASE_URL,
            Config.SUPABASE_KEY,
            options=ClientOptions(auto_refresh_token=False, persist_session=False)
        )
        if access_token:
            # set_session emits TOKEN_REFRESHED; the client re-keys postgrest, storage and functions on it
            client.auth.set_session(access_token, refresh_token or '')
        return client
    except Exception as e:
        logger.error(f"Error creating Supabase client: {str(e)}")
        raise
