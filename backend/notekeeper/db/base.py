from __future__ import annotations

from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from notekeeper.config import settings
from notekeeper.utils.logging import get_logger

logger = get_logger(__name__)


def create_request_supabase_client(bearer_token: str | None = None) -> Client:
    """Create a request-scoped Supabase client using the anon key.

    If a JWT is provided, set it as the PostgREST bearer so that RLS policies
    are enforced for all table operations in this request, on top of the
    owner filters every ledger applies.
    """
    logger.debug("Creating request-scoped Supabase client")
    anon_key = settings.supabase_anon_key
    if not anon_key:
        raise RuntimeError("supabase_anon_key is required for request client")

    client = create_client(
        settings.supabase_url,
        anon_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
    if bearer_token:
        client.postgrest.auth(bearer_token)
    return client
