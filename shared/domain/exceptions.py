"""
Domain Errors

Error taxonomy shared by every bounded context:
- ValidationError: malformed input (date ranges, prices, percentages)
- NotFoundError: unknown aggregate (product, commission, promotion)
- ConflictError: a uniqueness or overlap rule would be broken
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for all domain errors"""

    default_message = "Domain error"

    def __init__(self, message: Optional[str] = None, **payload: Any):
        self.message = message or self.default_message
        self.payload: Dict[str, Any] = payload
        super().__init__(self.message)

    def to_dict(self) -> dict:
        data = {'detail': self.message}
        data.update(self.payload)
        return data


class ValidationError(DomainError):
    default_message = "Invalid input"


class NotFoundError(DomainError):
    default_message = "Not found"


class ConflictError(DomainError):
    default_message = "Conflict"
