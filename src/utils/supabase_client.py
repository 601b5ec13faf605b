# utils/supabase_client.py

from typing import List

import httpx
from postgrest.exceptions import APIError
from supabase import Client as SupabaseClient
from supabase import create_client

from utils.errors import SupabaseFetch, SupabaseInitialization
from utils.logger import get_logger
from utils.secrets import SecretSet
from utils.settings import Settings

logger = get_logger("supabase_client")


def build_client(secrets: SecretSet, settings: Settings) -> SupabaseClient:
    """
    Build a Supabase client from the store URL / key secrets.

    Raises MissingSecret if either secret is absent and
    SupabaseInitialization if the client rejects them.
    """
    url = secrets.require(settings.store_url_secret)
    key = secrets.require(settings.store_key_secret)

    # create_client rejects a malformed URL or key with its own exception type
    try:
        client = create_client(url, key)
    except Exception as e:
        logger.error(
            "supabase.init_error",
            extra={"error": str(e)},
        )
        raise SupabaseInitialization() from e

    logger.info("Supabase client initialized successfully")
    return client


def fetch_push_tokens(client: SupabaseClient, table: str, column: str) -> List[str]:
    """
    Select every row of ``table`` and return the ``column`` values that
    are strings. Rows without a token are skipped.
    """
    try:
        resp = client.table(table).select(column).execute()
    except (APIError, httpx.HTTPError) as e:
        logger.error(
            "supabase.fetch_error",
            extra={"table": table, "error": str(e)},
        )
        raise SupabaseFetch() from e

    rows = resp.data or []
    tokens = [
        row[column]
        for row in rows
        if isinstance(row, dict) and isinstance(row.get(column), str)
    ]

    logger.info(
        "supabase.tokens_fetched",
        extra={"table": table, "rows": len(rows), "tokens": len(tokens)},
    )
    return tokens
