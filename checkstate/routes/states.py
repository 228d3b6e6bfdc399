"""
Checkstate: Checkbox State Route Handlers
===========================================

What:  /api/states (read a document's checked boxes) and /api/state
       (check or uncheck one box).
How:   Handlers extract and validate input, call CheckStore, and let the
       global exception handlers turn ValidationError/StorageError into
       plain-text 400/500 responses.

Neither path discriminates on the HTTP method: every method routed to a
path runs its handler, including verbs such as TRACE or PROPFIND. The
browser page uses GET for reads and POST for updates; PUT is accepted as
an update as well.
"""

import logging
from typing import Any, Dict, Tuple

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from fastapi.routing import APIRoute
from pydantic import ValidationError as PydanticValidationError
from starlette.requests import ClientDisconnect
from starlette.routing import Match
from starlette.types import Receive, Scope, Send

from checkstate.dependencies import get_store
from checkstate.exceptions import ValidationError
from checkstate.schemas.state import CheckedStatesResponse, StateUpdateRequest
from checkstate.services.state_store import CheckStore

logger = logging.getLogger(__name__)


class AnyMethodRoute(APIRoute):
    """
    APIRoute that matches its path for every HTTP method.

    Starlette reports a path match with a foreign method as PARTIAL and
    answers it with a 405 in handle(). Here that case is a full match and
    handle() always runs the endpoint. `methods` still lists the common
    verbs for the OpenAPI document.
    """

    def matches(self, scope: Scope) -> Tuple[Match, Dict[str, Any]]:
        match, child_scope = super().matches(scope)
        if match == Match.PARTIAL:
            return Match.FULL, child_scope
        return match, child_scope

    async def handle(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)


router = APIRouter(prefix="/api", tags=["States"], route_class=AnyMethodRoute)

# Documented verbs only; AnyMethodRoute accepts the rest too
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

UPDATE_SUCCESS_MESSAGE = "State updated successfully"


@router.api_route(
    "/states",
    methods=ALL_METHODS,
    response_model=CheckedStatesResponse,
    summary="List checked boxes of a document",
)
async def get_states(
    request: Request,
    store: CheckStore = Depends(get_store),
) -> CheckedStatesResponse:
    """
    Return the ids of all checked boxes for ?md_id=.

    A document with no recorded state returns an empty list. When md_id is
    repeated the first value is used.
    """
    values = request.query_params.getlist("md_id")
    md_id = values[0] if values else ""
    if not md_id:
        raise ValidationError(message="md_id query parameter is required", field="md_id")

    checked = await store.list_checked(md_id)
    return CheckedStatesResponse(checked=checked)


@router.api_route(
    "/state",
    methods=ALL_METHODS,
    response_class=PlainTextResponse,
    summary="Check or uncheck one box",
)
async def update_state(
    request: Request,
    store: CheckStore = Depends(get_store),
) -> PlainTextResponse:
    """
    Apply {"md_id", "check_id", "state"} from the JSON body.

    The body is decoded here rather than by FastAPI so that every decoding
    failure maps to the same 400 "Invalid JSON" answer.
    """
    try:
        body = await request.body()
    except ClientDisconnect as e:
        raise ValidationError(
            message="Failed to read request body",
            context={"error": str(e)},
        ) from e

    try:
        payload = StateUpdateRequest.model_validate_json(body)
    except PydanticValidationError as e:
        raise ValidationError(
            message="Invalid JSON",
            context={"errors": e.error_count()},
        ) from e

    if not payload.md_id or not payload.check_id:
        raise ValidationError(message="md_id and check_id are required")

    await store.set_checked(payload.md_id, payload.check_id, payload.state)

    logger.info(
        "State updated: md_id=%s check_id=%s state=%s",
        payload.md_id,
        payload.check_id,
        payload.state,
    )
    return PlainTextResponse(UPDATE_SUCCESS_MESSAGE)
