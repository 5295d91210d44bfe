"""Message models shared with the backend"""

from typing import List, Optional

from pydantic import BaseModel, TypeAdapter


class Message(BaseModel):
    """A message on the board"""
    id: Optional[int] = None
    content: str
    author: str
    created_at: Optional[str] = None
    user_id: Optional[int] = None


MessageList = TypeAdapter(List[Message])
