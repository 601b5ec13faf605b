import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

from utils.errors import InvalidEnvVar, MissingEnvVar
from utils.logger import get_logger

logger = get_logger("settings")

DEFAULT_SCHEDULED_TITLE = "25日だよ"
DEFAULT_SCHEDULED_BODY = "パートナーに請求しよう"


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read from the environment once per container."""

    api_key: str
    ssm_parameter_path: str
    aws_region: str = "us-east-1"
    users_table: str = "users"
    push_token_column: str = "push_token"
    scheduled_title: str = DEFAULT_SCHEDULED_TITLE
    scheduled_body: str = DEFAULT_SCHEDULED_BODY
    max_send_workers: int = 16
    store_url_secret: str = "supabase-url"
    store_key_secret: str = "supabase-key"
    provider_token_secret: str = "expo-access-token"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables.

    API_KEY and SSM_PARAMETER_PATH are required; everything else has a
    default. Raises MissingEnvVar naming every missing variable.
    """
    env = os.environ if environ is None else environ

    api_key = env.get("API_KEY")
    ssm_parameter_path = env.get("SSM_PARAMETER_PATH")

    missing = []
    if not api_key:
        missing.append("API_KEY")
    if not ssm_parameter_path:
        missing.append("SSM_PARAMETER_PATH")

    if missing:
        logger.error(
            "settings.missing_env",
            extra={"missing": missing},
        )
        raise MissingEnvVar(", ".join(missing))

    workers_str = env.get("MAX_SEND_WORKERS", "16")
    try:
        max_send_workers = int(workers_str)
        if max_send_workers < 1:
            raise ValueError(workers_str)
    except ValueError:
        logger.error(
            "settings.invalid_env",
            extra={"variable": "MAX_SEND_WORKERS", "value": workers_str},
        )
        raise InvalidEnvVar("MAX_SEND_WORKERS", workers_str)

    return Settings(
        api_key=api_key,
        ssm_parameter_path=ssm_parameter_path,
        aws_region=env.get("AWS_REGION", "us-east-1"),
        users_table=env.get("USERS_TABLE", "users"),
        push_token_column=env.get("PUSH_TOKEN_COLUMN", "push_token"),
        scheduled_title=env.get("SCHEDULED_TITLE", DEFAULT_SCHEDULED_TITLE),
        scheduled_body=env.get("SCHEDULED_BODY", DEFAULT_SCHEDULED_BODY),
        max_send_workers=max_send_workers,
        store_url_secret=env.get("STORE_URL_SECRET", "supabase-url"),
        store_key_secret=env.get("STORE_KEY_SECRET", "supabase-key"),
        provider_token_secret=env.get("PROVIDER_TOKEN_SECRET", "expo-access-token"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
