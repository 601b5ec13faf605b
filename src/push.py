import hmac

from utils import __version__
from utils import expo_client
from utils.dispatch import all_succeeded, send_all
from utils.errors import ApiError, DispatchFailed, InvalidApiKey
from utils.http import get_header, get_method, response
from utils.logger import get_logger
from utils.recipients import resolve_recipients, select_source
from utils.secrets import fetch_config
from utils.settings import Settings, get_settings

logger = get_logger("push")

NO_TOKENS_MESSAGE = "No push tokens found."
SENT_MESSAGE = "Push notifications sent successfully"


def _check_api_key(event: dict, settings: Settings) -> None:
    provided = get_header(event, "x-api-key")
    if provided is None or not hmac.compare_digest(
        provided.encode("utf-8"), settings.api_key.encode("utf-8")
    ):
        raise InvalidApiKey()


def _error_response(error: ApiError) -> dict:
    if error.status_code >= 500:
        logger.error(
            "push.request_failed",
            extra={"error_type": type(error).__name__, "error": str(error)},
            exc_info=error.__cause__ is not None,
        )
    else:
        logger.warning(
            "push.request_rejected",
            extra={
                "status": error.status_code,
                "error_type": type(error).__name__,
                "error": str(error),
            },
        )
    return response(error.status_code, error.to_body())


def handle(
    event: dict,
    settings: Settings,
    *,
    fetch_config=fetch_config,
    resolve_recipients=resolve_recipients,
    build_push_client=expo_client.build_client,
    close_push_client=expo_client.close_client,
    send_all=send_all,
) -> dict:
    """
    Run one invocation of the pipeline and map its outcome to a response.

    Collaborators are keyword arguments so tests can swap the remote ones.
    The push client lives for this invocation only and is closed on the way out.
    """
    try:
        # 1) Shared-secret check
        _check_api_key(event, settings)

        logger.info(
            "push.lambda_start",
            extra={"version": __version__, "method": get_method(event)},
        )

        # 2) Secrets from SSM, fetched fresh each invocation
        secrets = fetch_config(settings)
        push_client = build_push_client(secrets, settings)

        try:
            # 3) Method decides where the tokens come from
            source = select_source(event, settings)
            request = resolve_recipients(source, secrets, settings)

            if not request.recipients:
                logger.info("push.no_tokens", extra={"source": type(source).__name__})
                return response(200, {"message": NO_TOKENS_MESSAGE})

            # 4) Build everything before sending anything
            messages = expo_client.build_messages(
                request.title, request.body, request.recipients
            )

            # 5) Fan out, wait for all
            outcomes = send_all(push_client, messages, max_workers=settings.max_send_workers)

            if not all_succeeded(outcomes):
                failed = [o for o in outcomes if not o.ok]
                logger.error(
                    "push.dispatch_failed",
                    extra={
                        "failed": len(failed),
                        "total": len(outcomes),
                        "errors": [o.error for o in failed],
                    },
                )
                raise DispatchFailed(len(failed), len(outcomes))

            logger.info("push.sent", extra={"count": len(outcomes)})
            return response(200, {"message": SENT_MESSAGE})
        finally:
            close_push_client(push_client)

    except ApiError as e:
        return _error_response(e)


def lambda_handler(event, context):
    logger.debug(
        "push.invoke",
        extra={"request_id": getattr(context, "aws_request_id", None)},
    )

    try:
        settings = get_settings()
    except ApiError as e:
        # Misconfiguration is a 500, not a 4xx
        return _error_response(e)

    return handle(event, settings)

