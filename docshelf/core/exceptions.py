from typing import Any, Dict, Optional


class DocShelfError(Exception):
    code = "docshelf_error"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,  # collection, selector, id...
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.code
        self.details = details or {}


class InvalidEntityError(DocShelfError):
    """Value passed as an entity, model or selector cannot be used as one."""

    code = "invalid_entity"


class NotFoundError(DocShelfError):
    """No live document matched."""

    code = "not_found"
