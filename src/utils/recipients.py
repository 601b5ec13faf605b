"""
Recipient sources.

A request resolves to exactly one of two sources, chosen by HTTP method:

- ``StoreBacked`` (GET, scheduled trigger): fixed title/body from settings,
  tokens read from the Supabase users table.
- ``Inline`` (POST, ad-hoc trigger): title/body/token taken from the
  request body; the token is validated before anything touches the network.

Both resolve to a ``NotificationRequest`` so the rest of the pipeline does
not care where the tokens came from.
"""

from dataclasses import dataclass
from typing import Callable, Tuple, Union

from utils import supabase_client
from utils.errors import BadRequest, InvalidPushToken, MethodNotAllowed
from utils.expo_client import is_push_token
from utils.http import get_method, parse_json_body
from utils.logger import get_logger
from utils.secrets import SecretSet
from utils.settings import Settings

logger = get_logger("recipients")

INLINE_FIELDS = ("title", "body", "push_token")


@dataclass(frozen=True)
class NotificationRequest:
    title: str
    body: str
    recipients: Tuple[str, ...]


@dataclass(frozen=True)
class StoreBacked:
    title: str
    body: str


@dataclass(frozen=True)
class Inline:
    title: str
    body: str
    push_token: str


RecipientSource = Union[StoreBacked, Inline]


def parse_inline(event: dict) -> Inline:
    """
    Parse and validate an ad-hoc request body.

    Raises InvalidBody for unparseable bodies, BadRequest naming the first
    missing/non-string field, and InvalidPushToken for a malformed token.
    """
    payload = parse_json_body(event)

    for field in INLINE_FIELDS:
        if not isinstance(payload.get(field), str):
            logger.warning("recipients.bad_field", extra={"field": field})
            raise BadRequest(field)

    token = payload["push_token"]
    if not is_push_token(token):
        logger.warning(
            "recipients.invalid_token",
            extra={"token_preview": token[:24]},
        )
        raise InvalidPushToken()

    return Inline(title=payload["title"], body=payload["body"], push_token=token)


def select_source(event: dict, settings: Settings) -> RecipientSource:
    method = get_method(event)
    if method == "GET":
        return StoreBacked(title=settings.scheduled_title, body=settings.scheduled_body)
    if method == "POST":
        return parse_inline(event)
    raise MethodNotAllowed(method)


def resolve_recipients(
    source: RecipientSource,
    secrets: SecretSet,
    settings: Settings,
    store_client_factory: Callable = supabase_client.build_client,
) -> NotificationRequest:
    if isinstance(source, Inline):
        return NotificationRequest(source.title, source.body, (source.push_token,))

    if isinstance(source, StoreBacked):
        client = store_client_factory(secrets, settings)
        tokens = supabase_client.fetch_push_tokens(
            client, settings.users_table, settings.push_token_column
        )
        return NotificationRequest(source.title, source.body, tuple(tokens))

    raise TypeError(f"Unknown recipient source: {source!r}")
