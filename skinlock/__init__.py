"""Directory-based locking for named skin directories"""

from .core import SkinSet, SkinStatus
from .errors import (
    ConfigError,
    ErrorKind,
    InvalidResourceError,
    LockAcquireError,
    LockError,
    LockHeldError,
    LockReleaseError,
    LockResult,
    LockTimeoutError,
    SkinLockError,
)
from .lock import LOCK_DIR, SkinLock
from .paths import PathKind, PathResolver
from .store import ManifestStore, S3ManifestStore, open_store

__version__ = '0.1.0'

__all__ = [
    'ConfigError',
    'ErrorKind',
    'InvalidResourceError',
    'LOCK_DIR',
    'LockAcquireError',
    'LockError',
    'LockHeldError',
    'LockReleaseError',
    'LockResult',
    'LockTimeoutError',
    'ManifestStore',
    'PathKind',
    'PathResolver',
    'S3ManifestStore',
    'SkinLock',
    'SkinLockError',
    'SkinSet',
    'SkinStatus',
    'open_store',
]
