"""
Message model - a single logged utterance in a (user, session) stream
"""
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.services import stream_keys


class Message(BaseModel):
    """Immutable message value passed to LogStore.append"""

    model_config = ConfigDict(frozen=True)

    user_id: UUID
    session_id: UUID
    timestamp: int = Field(..., gt=0, description="Server-assigned milliseconds since epoch")
    text: str = Field(..., min_length=1)

    @property
    def log_key(self) -> str:
        return stream_keys.log_key(self.user_id, self.session_id)

    @property
    def entry_id(self) -> str:
        return stream_keys.entry_id(self.timestamp)

    def __repr__(self):
        return f"<Message(log_key={self.log_key}, entry_id={self.entry_id})>"
