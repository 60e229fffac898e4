import itertools
from datetime import datetime, timezone
from typing import Dict, Optional, List

import pytest
from fastapi import HTTPException, Request
from fastapi.testclient import TestClient

from dependencies import get_current_user, get_post_service
from main import app
from models.post import Post
from models.user import User, UserProfile
from services.posts import PostService


class InMemoryPostStore:
    """Dict-backed store with the same contract as FirestoreDB"""

    def __init__(self):
        self.posts: Dict[str, Post] = {}
        self.users: Dict[str, UserProfile] = {}
        self._ids = itertools.count(1)

    def create_post(self, post: Post) -> Post:
        post_id = f"post{next(self._ids)}"
        self.posts[post_id] = post.model_copy(update={"id": post_id}, deep=True)
        return self.posts[post_id].model_copy(deep=True)

    def get_post(self, post_id: str) -> Optional[Post]:
        post = self.posts.get(post_id)
        return post.model_copy(deep=True) if post else None

    def get_all_posts(self) -> List[Post]:
        ordered = sorted(self.posts.values(), key=lambda p: p.date, reverse=True)
        return [post.model_copy(deep=True) for post in ordered]

    def update_post(self, post_id, mutate):
        post = self.get_post(post_id)
        result = mutate(post)
        self.posts[post_id] = post
        return result

    def delete_post(self, post_id: str):
        self.posts.pop(post_id, None)

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        return self.users.get(user_id)


@pytest.fixture
def store():
    store = InMemoryPostStore()
    store.users["u1"] = UserProfile(name="Ada", avatar="https://example.com/ada.png")
    store.users["u2"] = UserProfile(name="Brian")
    return store


@pytest.fixture
def service(store):
    return PostService(store)


@pytest.fixture
def make_post(store):
    """Insert a post directly into the store with a fixed date"""

    def _make_post(user="u1", text="hello", date=None, **fields) -> Post:
        post = Post(
            text=text,
            name=store.users[user].name,
            user=user,
            date=date or datetime(2024, 1, 1, tzinfo=timezone.utc),
            **fields,
        )
        return store.create_post(post)

    return _make_post


async def fake_current_user(request: Request) -> User:
    """Treat the bearer token as the user id"""
    authorization = request.headers.get("Authorization", "")
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="No token, authorization denied")
    return User(user_id=authorization.split("Bearer ")[1])


@pytest.fixture
def client(service):
    app.dependency_overrides[get_current_user] = fake_current_user
    app.dependency_overrides[get_post_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
