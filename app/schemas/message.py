"""
Pydantic schemas for the Message API
"""
from typing import List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MessageRequest(BaseModel):
    """Body of POST /message"""
    model_config = ConfigDict(populate_by_name=True)

    user_id: UUID = Field(..., alias="userId", description="User ID")
    session_id: UUID = Field(..., alias="sessionId", description="Session ID")
    message: str = Field(..., min_length=1, description="Message content")


class MessageResponse(BaseModel):
    """Response of POST /message"""
    timestamp: int = Field(..., description="Message timestamp in milliseconds")


class QueryResponse(BaseModel):
    """Response of GET /message"""
    messages: List[str] = Field(default_factory=list, description="List of messages")
