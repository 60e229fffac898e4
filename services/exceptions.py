from typing import Dict, Any


class PostServiceError(Exception):
    """Base class for errors raised by the post service"""

    status_code = 500

    def __init__(self, msg: str):
        super().__init__(msg)
        self.msg = msg

    def to_body(self) -> Dict[str, Any]:
        return {"msg": self.msg}


class ValidationError(PostServiceError):
    """Request input failed a field rule"""

    status_code = 400

    def __init__(self, msg: str, param: str = "text"):
        super().__init__(msg)
        self.param = param

    def to_body(self) -> Dict[str, Any]:
        return {"errors": [{"msg": self.msg, "param": self.param, "location": "body"}]}


class DuplicateActionError(PostServiceError):
    """The action was already applied by this user"""

    status_code = 400


class InvalidStateError(PostServiceError):
    """The action does not apply to the resource in its current state"""

    status_code = 400


class AuthorizationError(PostServiceError):
    """The acting user does not own the resource"""

    status_code = 401

    def __init__(self, msg: str = "User not authorized"):
        super().__init__(msg)


class NotFoundError(PostServiceError):
    status_code = 404


class ServerError(PostServiceError):
    """Unexpected failure; the message never carries internal detail"""

    status_code = 500

    def __init__(self, msg: str = "Server Error"):
        super().__init__(msg)
