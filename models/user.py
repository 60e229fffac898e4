from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    user_id: str
    email: Optional[str] = None


class UserProfile(BaseModel):
    """Display fields copied onto posts and comments when they are written"""
    name: str
    avatar: Optional[str] = None
