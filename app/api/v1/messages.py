"""
Message endpoints - append to and read from a (user, session) log
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from app.core.config import settings
from app.core.dependencies import get_log_store, get_timestamp_ms
from app.core.rate_limit import limiter
from app.models.message import Message
from app.schemas.message import MessageRequest, MessageResponse, QueryResponse
from app.services import stream_keys
from app.services.exceptions import DuplicateEntry, InvalidIdentifier, StoreUnavailable
from app.services.log_store import LogStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/message",
    response_model=MessageResponse,
    summary="Log a message",
    description="Adds a message to the user session stream",
)
@limiter.limit(settings.RATE_LIMIT)
async def post_message(
    request: Request,
    body: MessageRequest,
    log_store: LogStore = Depends(get_log_store),
    timestamp: int = Depends(get_timestamp_ms),
):
    """
    Append a message. The timestamp is assigned here, never by the client.

    Returns:
        Timestamp embedded in the assigned entry id
    """
    message = Message(
        user_id=body.user_id,
        session_id=body.session_id,
        timestamp=timestamp,
        text=body.message,
    )

    try:
        assigned = await log_store.append(message)
    except DuplicateEntry as e:
        logger.warning(f"Duplicate entry rejected: {e}")
        raise HTTPException(
            status_code=409,
            detail="A message was already logged for this session in the same millisecond"
        )
    except StoreUnavailable as e:
        logger.error(f"Failed to add message to stream: {e}")
        raise HTTPException(status_code=503, detail="Failed to add message to stream")

    timestamp = stream_keys.timestamp_from_entry_id(assigned)
    logger.info(
        f"Message logged - userId={body.user_id} "
        f"sessionId={body.session_id} timestamp={timestamp}"
    )
    return MessageResponse(timestamp=timestamp)


@router.get(
    "/message",
    response_model=QueryResponse,
    summary="Query messages",
    description="Retrieves messages from a user session logged at or after a given timestamp",
)
@limiter.limit(settings.RATE_LIMIT)
async def get_messages(
    request: Request,
    user_id: str = Query(..., alias="userId", description="User ID"),
    session_id: str = Query(..., alias="sessionId", description="Session ID"),
    timestamp: int = Query(..., ge=1, description="Timestamp in milliseconds"),
    log_store: LogStore = Depends(get_log_store),
):
    """
    Messages of one session, oldest first. Unknown or expired sessions
    return an empty list.
    """
    try:
        user_uuid = stream_keys.parse_identifier(user_id, "userId")
        session_uuid = stream_keys.parse_identifier(session_id, "sessionId")
    except InvalidIdentifier as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        messages = await log_store.query_since(user_uuid, session_uuid, timestamp)
    except StoreUnavailable as e:
        logger.error(
            f"Failed to query messages - userId={user_id} "
            f"sessionId={session_id} timestamp={timestamp}: {e}"
        )
        raise HTTPException(status_code=503, detail="Failed to query messages")

    logger.info(
        f"Messages queried - userId={user_id} sessionId={session_id} "
        f"timestamp={timestamp} count={len(messages)}"
    )
    return QueryResponse(messages=messages)
