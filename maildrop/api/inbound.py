"""Inbound email webhook: stores the attachments of each relayed email."""

import hmac

from pydantic import SecretStr
from robyn import Request, Response, status_codes

from maildrop.core.logger import LogIcon, logger
from maildrop.core.router import Router, empty_response
from maildrop.core.settings import settings as st
from maildrop.services.attachments import iter_request_files
from maildrop.services.orchestrator import upload_attachments
from maildrop.services.store import AttachmentStore

router = Router(__file__, prefix="")


def key_matches(provided: str | None, api_key: SecretStr) -> bool:
    """Constant-time comparison of the ``key`` query parameter with the secret."""
    expected = api_key.get_secret_value()
    if not expected or provided is None:
        return False
    return hmac.compare_digest(provided.encode(), expected.encode())


def request_files(request: Request) -> dict:
    """Files Robyn decoded from the multipart body, keyed by filename."""
    return dict(getattr(request, "files", None) or {})


async def handle_inbound_email(
    request: Request,
    store: AttachmentStore,
    api_key: SecretStr,
    *,
    prefix: str = "",
) -> Response:
    """
    Gate the request, then store its attachments.

    Non-POST requests get 405 and a wrong or missing ``key`` gets 403. Once
    past both gates the response is always 200 with an empty body: the relay
    redelivers on any non-2xx, and a batch may already be partially stored,
    so upload failures are logged and masked instead of reported.
    """
    if request.method.upper() != "POST":
        logger.info("Method not allowed", icon=LogIcon.FORBIDDEN, method=request.method)
        return empty_response(status_codes.HTTP_405_METHOD_NOT_ALLOWED)

    if not key_matches(request.query_params.get("key", None), api_key):
        logger.warning("Rejected inbound email: invalid key", icon=LogIcon.AUTH)
        return empty_response(status_codes.HTTP_403_FORBIDDEN)

    try:
        batch = await upload_attachments(
            iter_request_files(request_files(request)),
            store,
            prefix=prefix,
        )
    except Exception:
        logger.exception("Inbound email processing failed", icon=LogIcon.ERROR)
        return empty_response(status_codes.HTTP_200_OK)

    logger.info(
        "Inbound email stored",
        icon=LogIcon.EMAIL,
        namespace=batch.namespace,
        objects=len(batch.objects),
    )
    return empty_response(status_codes.HTTP_200_OK)


@router.route(st.INBOUND_PATH)
async def receive_email(request: Request, global_dependencies) -> Response:
    """Webhook target for the email relay."""
    state = global_dependencies["state"]
    return await handle_inbound_email(
        request,
        store=state.storage,
        api_key=st.API_KEY,
        prefix=st.ATTACHMENTS_PREFIX,
    )
