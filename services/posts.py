import functools
import logging
from typing import List, Optional, Protocol, Callable, TypeVar

import bleach
from google.api_core.exceptions import GoogleAPIError

from models.post import Post, Like, Comment
from models.user import UserProfile
from services.exceptions import (
    AuthorizationError,
    DuplicateActionError,
    InvalidStateError,
    NotFoundError,
    ServerError,
    ValidationError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

POST_NOT_FOUND = "Post Not Found"


class PostStore(Protocol):
    """Document store holding posts and the user profiles they copy from"""

    def create_post(self, post: Post) -> Post:
        ...

    def get_post(self, post_id: str) -> Optional[Post]:
        ...

    def get_all_posts(self) -> List[Post]:
        """Every post, newest first."""
        ...

    def update_post(self, post_id: str, mutate: Callable[[Optional[Post]], T]) -> T:
        ...

    def delete_post(self, post_id: str) -> None:
        ...

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        ...


def store_call(func):
    """Turn store failures into a generic ServerError after logging them"""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except GoogleAPIError as e:
            logger.exception("Store failure in %s", func.__name__)
            raise ServerError() from e

    return wrapper


def require_text(text: Optional[str]) -> str:
    """Reject text that is blank once every tag is stripped"""
    if not bleach.clean(text or "", tags=set(), strip=True).strip():
        raise ValidationError("Text is required")
    return text


def _existing(post: Optional[Post]) -> Post:
    if post is None:
        raise NotFoundError(POST_NOT_FOUND)
    return post


class PostService:
    def __init__(self, store: PostStore):
        self.store = store

    def _get_profile(self, user_id: str) -> UserProfile:
        profile = self.store.get_user_profile(user_id)
        if profile is None:
            logger.error("No profile document for authenticated user %s", user_id)
            raise ServerError()
        return profile

    @store_call
    def create_post(self, user_id: str, text: str) -> Post:
        """
        Create a post authored by ``user_id``

        The author's name and avatar are copied onto the post and never refreshed.
        """
        text = require_text(text)
        profile = self._get_profile(user_id)

        post = self.store.create_post(Post(
            text=text,
            name=profile.name,
            avatar=profile.avatar,
            user=user_id,
        ))
        logger.info("Post %s created by %s", post.id, user_id)
        return post

    @store_call
    def get_posts(self) -> List[Post]:
        return self.store.get_all_posts()

    @store_call
    def get_post(self, post_id: str) -> Post:
        return _existing(self.store.get_post(post_id))

    @store_call
    def delete_post(self, post_id: str, user_id: str):
        """Delete a post; only its author may do so"""
        post = _existing(self.store.get_post(post_id))
        if post.user != user_id:
            logger.warning("User %s tried to delete post %s owned by %s", user_id, post_id, post.user)
            raise AuthorizationError()

        self.store.delete_post(post_id)
        logger.info("Post %s deleted", post_id)

    @store_call
    def like_post(self, post_id: str, user_id: str) -> List[Like]:
        """Add the user's like to the front of the post's likes"""

        def like(post: Optional[Post]) -> List[Like]:
            post = _existing(post)
            if post.liked_by(user_id):
                raise DuplicateActionError("Post already liked")
            post.likes.insert(0, Like(user=user_id))
            return post.likes

        likes = self.store.update_post(post_id, like)
        logger.info("Post %s liked by %s", post_id, user_id)
        return likes

    @store_call
    def unlike_post(self, post_id: str, user_id: str) -> List[Like]:
        """Remove every like the user has on the post"""

        def unlike(post: Optional[Post]) -> List[Like]:
            post = _existing(post)
            if not post.liked_by(user_id):
                raise InvalidStateError("Post has not yet been liked")
            post.likes = [like for like in post.likes if like.user != user_id]
            return post.likes

        likes = self.store.update_post(post_id, unlike)
        logger.info("Post %s unliked by %s", post_id, user_id)
        return likes

    @store_call
    def add_comment(self, post_id: str, user_id: str, text: str) -> List[Comment]:
        """Add a comment to the front of the post's comments"""
        text = bleach.clean(require_text(text), strip=True)
        profile = self._get_profile(user_id)

        def comment(post: Optional[Post]) -> List[Comment]:
            post = _existing(post)
            post.comments.insert(0, Comment(
                text=text,
                name=profile.name,
                avatar=profile.avatar,
                user=user_id,
            ))
            return post.comments

        comments = self.store.update_post(post_id, comment)
        logger.info("Comment added to post %s by %s", post_id, user_id)
        return comments

    @store_call
    def get_comments(self, post_id: str) -> List[Comment]:
        return _existing(self.store.get_post(post_id)).comments

    @store_call
    def delete_comment(self, post_id: str, comment_id: str, user_id: str) -> List[Comment]:
        """Delete a comment; only its author may do so"""

        def remove(post: Optional[Post]) -> List[Comment]:
            post = _existing(post)
            target = next((c for c in post.comments if c.id == comment_id), None)
            if target is None:
                raise NotFoundError("Comment does not exist")
            if target.user != user_id:
                raise AuthorizationError()
            post.comments = [c for c in post.comments if c.id != comment_id]
            return post.comments

        comments = self.store.update_post(post_id, remove)
        logger.info("Comment %s removed from post %s", comment_id, post_id)
        return comments
