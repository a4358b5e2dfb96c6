"""Authentication layer: interfaces and client-local token storage."""

from sportclub.auth.interfaces import TokenProvider
from sportclub.auth.storage import LocalStorage

__all__ = ["LocalStorage", "TokenProvider"]
