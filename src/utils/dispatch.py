from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

from exponent_server_sdk import (
    DeviceNotRegisteredError,
    PushClient,
    PushMessage,
    PushTicketError,
)

from utils.logger import get_logger

logger = get_logger("dispatch")


@dataclass(frozen=True)
class DispatchOutcome:
    token: str
    ok: bool
    error: Optional[str] = None
    ticket_status: Optional[str] = None


def _send_one(client: PushClient, message: PushMessage) -> DispatchOutcome:
    """
    Publish a single message. A raised exception is a failed send; a
    ticket-level error in an accepted publish is logged but not a failure.
    """
    try:
        ticket = client.publish(message)
    except Exception as e:
        logger.error(
            "dispatch.send_error",
            extra={"token_preview": message.to[:24], "error": repr(e)},
        )
        return DispatchOutcome(token=message.to, ok=False, error=repr(e))

    status = getattr(ticket, "status", None)
    try:
        ticket.validate_response()
    except DeviceNotRegisteredError:
        logger.warning(
            "dispatch.device_not_registered",
            extra={"token_preview": message.to[:24]},
        )
    except PushTicketError as e:
        logger.warning(
            "dispatch.ticket_error",
            extra={"token_preview": message.to[:24], "error": str(e)},
        )

    return DispatchOutcome(token=message.to, ok=True, ticket_status=status)


def send_all(
    client: PushClient,
    messages: Sequence[PushMessage],
    max_workers: int = 16,
) -> List[DispatchOutcome]:
    """
    Submit every send up front and wait for all of them. Outcomes come
    back in the same order as ``messages``.

    At most ``max_workers`` sends are in flight at once; the rest wait in
    the pool queue and start as workers free up. None are cancelled.
    """
    if not messages:
        return []

    workers = max(1, min(len(messages), max_workers))
    logger.info(
        "dispatch.start",
        extra={"count": len(messages), "workers": workers},
    )

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_send_one, client, msg) for msg in messages]
        outcomes = [future.result() for future in futures]

    failed = sum(1 for o in outcomes if not o.ok)
    logger.info(
        "dispatch.done",
        extra={"count": len(outcomes), "failed": failed},
    )
    return outcomes


def all_succeeded(outcomes: Sequence[DispatchOutcome]) -> bool:
    return all(o.ok for o in outcomes)
