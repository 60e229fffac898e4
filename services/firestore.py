import logging
import re
from typing import List, Optional, Callable, TypeVar

import firebase_admin
from firebase_admin import firestore as fs
from google.cloud import firestore

from models.post import Post
from models.user import UserProfile

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Firestore rejects ids like "__foo__" as reserved
RESERVED_ID = re.compile(r"^__.*__$")
MAX_ID_BYTES = 1500


def is_valid_document_id(document_id: str) -> bool:
    """Check that a string can address a single document in a collection"""
    if not document_id or document_id in (".", ".."):
        return False
    if "/" in document_id or RESERVED_ID.match(document_id):
        return False
    return len(document_id.encode("utf-8")) <= MAX_ID_BYTES


class FirestoreDB:
    def __init__(self, app: firebase_admin.App, posts_collection: str = "posts", users_collection: str = "users"):
        self.db = fs.client(app)
        self.posts_collection = posts_collection
        self.users_collection = users_collection

    def collection(self, name: str):
        return self.db.collection(name)

    @staticmethod
    def _to_post(snapshot) -> Post:
        post_data = snapshot.to_dict()
        post_data["id"] = snapshot.id
        return Post(**post_data)

    def get_all_posts(self) -> List[Post]:
        """Get all posts sorted by date descending"""
        posts_ref = self.collection(self.posts_collection) \
            .order_by("date", direction=firestore.Query.DESCENDING) \
            .stream()
        return [self._to_post(doc) for doc in posts_ref]

    def create_post(self, post: Post) -> Post:
        """Persist a new post and return it with its generated id"""
        new_post_ref = self.collection(self.posts_collection).document()
        new_post_ref.set(post.to_document())
        return post.model_copy(update={"id": new_post_ref.id})

    def get_post(self, post_id: str) -> Optional[Post]:
        """Get a post by ID, None when missing or when the id cannot name a document"""
        if not is_valid_document_id(post_id):
            return None
        snapshot = self.collection(self.posts_collection).document(post_id).get()
        if not snapshot.exists:
            return None
        return self._to_post(snapshot)

    def update_post(self, post_id: str, mutate: Callable[[Optional[Post]], T]) -> T:
        """
        Read a post, apply ``mutate`` and write the result back in one transaction

        ``mutate`` receives None for a missing post and is expected to raise in that
        case. It may run more than once if Firestore retries the transaction, so it
        must only touch the post it is given.
        """
        if not is_valid_document_id(post_id):
            return mutate(None)

        post_ref = self.collection(self.posts_collection).document(post_id)
        transaction = self.db.transaction()

        @firestore.transactional
        def update_in_transaction(transaction, post_ref):
            snapshot = post_ref.get(transaction=transaction)
            post = self._to_post(snapshot) if snapshot.exists else None
            result = mutate(post)
            transaction.set(post_ref, post.to_document())
            return result

        return update_in_transaction(transaction, post_ref)

    def delete_post(self, post_id: str):
        self.collection(self.posts_collection).document(post_id).delete()

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        """Get the display name and avatar for a user"""
        if not is_valid_document_id(user_id):
            return None
        snapshot = self.collection(self.users_collection).document(user_id).get()
        if not snapshot.exists:
            return None

        user_data = snapshot.to_dict()
        return UserProfile(
            name=user_data.get("username", "Unknown"),
            avatar=user_data.get("profileIcon"),
        )
