import uuid
from datetime import datetime, timezone
from typing import List, Optional, Dict, Any

from pydantic import BaseModel, Field, field_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Like(BaseModel):
    user: str


class Comment(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    text: str
    name: str
    avatar: Optional[str] = None
    user: str
    date: datetime = Field(default_factory=utc_now)


class Post(BaseModel):
    id: Optional[str] = None
    text: str
    name: str
    avatar: Optional[str] = None
    user: str
    likes: List[Like] = []
    comments: List[Comment] = []
    date: datetime = Field(default_factory=utc_now)

    def liked_by(self, user_id: str) -> bool:
        return any(like.user == user_id for like in self.likes)

    def to_document(self) -> Dict[str, Any]:
        """Firestore payload; the id lives on the document reference, not in the data"""
        return self.model_dump(exclude={"id"})


class TextRequest(BaseModel):
    text: str = Field(default="", validate_default=True)

    @field_validator("text")
    @classmethod
    def text_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Text is required")
        return value


class PostCreate(TextRequest):
    pass


class CommentCreate(TextRequest):
    pass
