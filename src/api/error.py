from fastapi import status
from src.libs.result import Error


class ClientError(Exception):
    """Business failure rendered to the caller with its own code and message"""

    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)

    def to_dict(self) -> dict:
        return {"code": self.base_error.code, "message": self.base_error.message}


class ServerError(Exception):
    """Unexpected failure; the message stays in the logs"""

    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)

    def to_dict(self) -> dict:
        return {"code": self.base_error.code, "message": "Internal server error"}
