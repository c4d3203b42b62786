"""Exception hierarchy for EduAssist.

Every error raised on purpose by the service layer derives from
EduAssistError so the API boundary can turn it into a JSON body.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class EduAssistError(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "error_code": self.error_code,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class NotFoundError(EduAssistError):
    """A requested row does not exist."""

    def __init__(self, resource: str, resource_id: str, **kwargs):
        super().__init__(
            f"{resource} '{resource_id}' not found",
            error_code="NOT_FOUND",
            status_code=404,
            **kwargs
        )
        self.details.update({"resource": resource, "id": resource_id})


class AssistantNotFoundError(NotFoundError):
    """The assistant does not exist or is not published."""

    def __init__(self, assistant_id: str, **kwargs):
        super().__init__("Assistant", assistant_id, **kwargs)


class LLMServiceError(EduAssistError):
    """The language model call failed, timed out or returned no text."""

    def __init__(self, message: str, model: Optional[str] = None, **kwargs):
        super().__init__(message, error_code="LLM_ERROR", status_code=502, **kwargs)
        self.details["model"] = model


class StoreError(EduAssistError):
    """A read or write against the persistence store failed."""

    def __init__(self, message: str, table: Optional[str] = None, **kwargs):
        super().__init__(message, error_code="STORE_ERROR", **kwargs)
        self.details["table"] = table
