"""Supabase client for the users table."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get the cached Supabase client, or ``None`` when credentials are missing.

    Creating the client does not touch the network; the first query against
    ``settings.users_table`` is where connection problems surface.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase credentials not configured (set TERRITORY_SUPABASE_URL and TERRITORY_SUPABASE_KEY)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client for {settings.supabase_url}: {e}")
        return None


# Example usage patterns against the users table:
#
# # Population scan scoped to a city
# result = client.table('users') \
#     .select('id, country, state, city, zipcode') \
#     .ilike('country', '%India%') \
#     .ilike('city', '%Pune%') \
#     .execute()
#
# # Territory write
# result = client.table('users') \
#     .update({'role': 'admin', 'admin_assigned_location': {...}}) \
#     .eq('id', user_id) \
#     .execute()
