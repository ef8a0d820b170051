"""
Service runtime layer for qrmfg: the shared error model.
"""

from .errors import ErrorCode, ServiceError

__all__ = [
    "ErrorCode",
    "ServiceError",
]
