from typing import List, Dict

from fastapi import APIRouter

from dependencies import Posts, CurrentUser
from models.post import Post, PostCreate, CommentCreate, Like, Comment

router = APIRouter()


@router.post("")
def create_post(payload: PostCreate, current_user: CurrentUser, posts: Posts) -> Post:
    """Create a post as the current user"""
    return posts.create_post(current_user.user_id, payload.text)


@router.get("")
def get_posts(current_user: CurrentUser, posts: Posts) -> List[Post]:
    """Get all posts, newest first"""
    return posts.get_posts()


@router.get("/{post_id}")
def get_post(post_id: str, current_user: CurrentUser, posts: Posts) -> Post:
    return posts.get_post(post_id)


@router.delete("/{post_id}")
def delete_post(post_id: str, current_user: CurrentUser, posts: Posts) -> Dict[str, str]:
    """Delete a post owned by the current user"""
    posts.delete_post(post_id, current_user.user_id)
    return {"msg": "Post deleted"}


@router.put("/like/{post_id}")
def like_post(post_id: str, current_user: CurrentUser, posts: Posts) -> List[Like]:
    """
    Like a post

    Returns:
        The post's likes, newest first
    """
    return posts.like_post(post_id, current_user.user_id)


@router.put("/unlike/{post_id}")
def unlike_post(post_id: str, current_user: CurrentUser, posts: Posts) -> List[Like]:
    """
    Remove the current user's like from a post

    Returns:
        The post's remaining likes
    """
    return posts.unlike_post(post_id, current_user.user_id)


@router.post("/comment/{post_id}")
def add_comment(post_id: str, payload: CommentCreate, current_user: CurrentUser, posts: Posts) -> List[Comment]:
    """
    Comment on a post

    Returns:
        The post's comments, newest first
    """
    return posts.add_comment(post_id, current_user.user_id, payload.text)


@router.get("/comment/{post_id}")
def get_comments(post_id: str, current_user: CurrentUser, posts: Posts) -> List[Comment]:
    return posts.get_comments(post_id)


@router.delete("/comment/{post_id}/{comment_id}")
def delete_comment(post_id: str, comment_id: str, current_user: CurrentUser, posts: Posts) -> List[Comment]:
    """Delete one of the current user's comments"""
    return posts.delete_comment(post_id, comment_id, current_user.user_id)
