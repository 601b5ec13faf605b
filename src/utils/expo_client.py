# utils/expo_client.py

import re
from typing import List, Sequence

import requests
from exponent_server_sdk import PushClient, PushMessage

from utils.errors import PushMessageBuild
from utils.logger import get_logger
from utils.secrets import SecretSet
from utils.settings import Settings

logger = get_logger("expo_client")


_UUID_TOKEN = re.compile(
    r"[a-z\d]{8}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{12}", re.IGNORECASE
)


def is_push_token(token) -> bool:
    """
    Expo token-format predicate.

    Accepts ``ExponentPushToken[...]``, ``ExpoPushToken[...]`` and the bare
    UUID form. The SDK check alone only looks at the prefix, so the
    brackets are checked here too.
    """
    if not isinstance(token, str):
        return False
    if PushClient.is_exponent_push_token(token) or token.startswith("ExpoPushToken"):
        return (
            token.startswith(("ExponentPushToken[", "ExpoPushToken["))
            and token.endswith("]")
        )
    return _UUID_TOKEN.fullmatch(token) is not None


def build_client(secrets: SecretSet, settings: Settings) -> PushClient:
    """
    Build an Expo PushClient authenticated with the access token secret.

    Raises MissingSecret if the token is not in the SecretSet.
    """
    access_token = secrets.require(settings.provider_token_secret)

    session = requests.Session()
    session.headers.update(
        {
            "Authorization": f"Bearer {access_token}",
            "accept": "application/json",
            "accept-encoding": "gzip, deflate",
            "content-type": "application/json",
        }
    )

    logger.info("Expo push client initialized successfully")
    return PushClient(session=session)


def close_client(client: PushClient) -> None:
    """Close the HTTP session behind a client built by build_client."""
    session = getattr(client, "session", None)
    if session is not None:
        session.close()


def build_messages(title: str, body: str, tokens: Sequence[str]) -> List[PushMessage]:
    """
    Build one PushMessage per token, in order.

    A token that fails Expo's format check rejects the whole batch with
    PushMessageBuild; nothing is partially built.
    """
    messages = []
    for index, token in enumerate(tokens):
        if not is_push_token(token):
            logger.error(
                "expo.build_error",
                extra={"index": index, "token_preview": str(token)[:24]},
            )
            raise PushMessageBuild(f"Token at index {index} is not an Expo push token")
        messages.append(PushMessage(to=token, title=title, body=body))

    logger.info("expo.messages_built", extra={"count": len(messages)})
    return messages
