"""Result and error types for skin locking"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Failure kinds reported by lock and marker operations"""

    INVALID_RESOURCE = 'invalid_resource'
    LOCK_TIMEOUT = 'lock_timeout'
    LOCK_CREATE_FAILED = 'lock_create_failed'
    LOCK_RELEASE_FAILED = 'lock_release_failed'
    NOT_LOCKED = 'not_locked'
    DIRECTORY_EXISTS = 'directory_exists'
    DIRECTORY_CREATE_FAILED = 'directory_create_failed'
    DIRECTORY_REMOVE_FAILED = 'directory_remove_failed'


class LockResult:
    """Outcome of a lock or marker operation, truthy on success"""

    __slots__ = ('ok', 'error', 'message')

    def __init__(self, ok: bool, error: Optional[ErrorKind] = None, message: str = ''):
        self.ok = ok
        self.error = error
        self.message = message

    @classmethod
    def success(cls) -> 'LockResult':
        return cls(True)

    @classmethod
    def failure(cls, error: ErrorKind, message: str = '') -> 'LockResult':
        return cls(False, error, message)

    def __bool__(self):
        return self.ok

    def __eq__(self, other):
        if not isinstance(other, LockResult):
            return NotImplemented
        return (self.ok, self.error, self.message) == (other.ok, other.error, other.message)

    def __repr__(self):
        if self.ok:
            return 'LockResult(ok=True)'
        return f'LockResult(ok=False, error={self.error.name}, message={self.message!r})'


class SkinLockError(Exception):
    """Base class for skinlock exceptions"""


class InvalidResourceError(SkinLockError):
    """Raised when a handle has no usable skin name"""


class ConfigError(SkinLockError):
    """Raised for missing or unusable configuration"""


class LockError(SkinLockError):
    """Raised by scoped acquisition when a lock operation fails"""

    def __init__(self, result: LockResult):
        super().__init__(result.message or result.error.value)
        self.result = result


class LockTimeoutError(LockError):
    """The marker directory stayed held past the deadline"""


class LockAcquireError(LockError):
    """The marker directory could not be created"""


class LockReleaseError(LockError):
    """The marker directory could not be removed"""


class LockHeldError(SkinLockError):
    """Raised when a handle holding a lock is rebound to another skin"""
