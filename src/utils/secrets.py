from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Iterator

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from utils.errors import MissingEnvVar, MissingSecret, SsmError
from utils.logger import get_logger
from utils.settings import Settings

logger = get_logger("secrets")


class SecretSet(Mapping):
    """
    Read-only view of the secrets fetched for one invocation.

    Keys are the leaf names of the Parameter Store entries, e.g.
    ``/expo-push-api/supabase-key`` is stored as ``supabase-key``.
    """

    def __init__(self, values: Mapping[str, str]):
        self._values = MappingProxyType(dict(values))

    def __getitem__(self, key: str) -> str:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def require(self, key: str) -> str:
        try:
            return self._values[key]
        except KeyError:
            logger.error("secrets.missing", extra={"key": key})
            raise MissingSecret(key) from None

    def __repr__(self) -> str:
        # Never render values.
        return f"SecretSet(keys={sorted(self._values)})"


def leaf_name(parameter_name: str) -> str:
    """Final path segment of a Parameter Store name."""
    return parameter_name.split("/")[-1]


def fetch_config(settings: Settings, ssm_client=None) -> SecretSet:
    """
    Fetch every parameter under ``settings.ssm_parameter_path`` in a single
    ``get_parameters_by_path`` call with decryption.

    Results are not paginated: if SSM truncates the listing, the remainder
    is ignored and a warning is logged. Nothing is cached between calls.
    """
    path = settings.ssm_parameter_path
    if not path:
        raise MissingEnvVar("SSM_PARAMETER_PATH")

    client = ssm_client or boto3.client("ssm", region_name=settings.aws_region)

    logger.info("secrets.fetch_start", extra={"path": path})

    try:
        resp = client.get_parameters_by_path(Path=path, WithDecryption=True)
    except (ClientError, BotoCoreError) as e:
        logger.error(
            "secrets.fetch_error",
            extra={"path": path, "error": str(e)},
        )
        raise SsmError() from e

    values: Dict[str, str] = {}
    for param in resp.get("Parameters", []):
        name = param.get("Name")
        value = param.get("Value")
        if name is None or value is None:
            continue
        values[leaf_name(name)] = value

    if resp.get("NextToken"):
        logger.warning(
            "secrets.truncated",
            extra={"path": path, "fetched": len(values)},
        )

    logger.info(
        "secrets.fetched",
        extra={"path": path, "keys": sorted(values)},
    )
    return SecretSet(values)
