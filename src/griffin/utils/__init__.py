"""Utility modules for Griffin."""

from griffin.utils.locks import KeyedLock, LockTimeoutError

__all__ = ["KeyedLock", "LockTimeoutError"]
