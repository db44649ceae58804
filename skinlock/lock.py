"""Lock mechanism for skin directories

A skin is locked by creating a 'lock' directory inside it. Directory
creation is atomic, so among competing processes exactly one mkdir wins;
the others see EEXIST and poll until the deadline.
"""

import os
import time
import logging
from contextlib import contextmanager
from typing import Callable, Dict, List, Mapping, Optional

from .errors import (
    ErrorKind,
    InvalidResourceError,
    LockAcquireError,
    LockHeldError,
    LockReleaseError,
    LockResult,
    LockTimeoutError,
)
from .paths import PathKind, PathResolver
from .utils import normalize_name

logger = logging.getLogger(__name__)

LOCK_DIR = 'lock'
DEFAULT_TIMEOUT = 3.0
DEFAULT_POLL_INTERVAL = 0.5

MESSAGES = {
    'unable_to_lock_skin': 'Unable to lock the {name} skin.',
    'unable_to_unlock_the_skin_directory': 'Unable to unlock the {name} skin directory.',
    'skin_not_locked': 'The {name} skin is not locked by this handle.',
    'directory_creation_failure': 'Unable to create the {name} directory.',
    'directory_deletion_failure': 'Unable to delete the {name} directory.',
}


class SkinLock:
    """Handle on a single skin: identity, cached lookups, permissions and the lock

    The lock is not re-entrant. `locked` only records that this handle
    created the marker; if something else removes the marker directory the
    flag goes stale until reconcile() is called.
    """

    def __init__(self,
                 resolver: PathResolver,
                 store,
                 name: Optional[str] = None,
                 installed: Optional[Mapping[str, object]] = None,
                 timeout: float = DEFAULT_TIMEOUT,
                 poll_interval: float = DEFAULT_POLL_INTERVAL,
                 reporter: Optional[Callable[[str], None]] = None):
        self.resolver = resolver
        self.store = store
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.reporter = reporter
        self.results: List[str] = []
        self.locked = False
        self.name: Optional[str] = None
        self._installed_snapshot: Dict[str, object] = dict(installed or {})
        self._is_installed: Optional[bool] = None
        self._is_in_use: Optional[bool] = None
        if name:
            self.set_name(name)

    def set_name(self, raw: str):
        """Bind the handle to a skin; clears cached lookups

        A handle holding a lock cannot be moved to another skin.
        """
        name = normalize_name(raw) or None
        if self.locked and name != self.name:
            raise LockHeldError(f"release the {self.name} skin lock before switching to {raw!r}")
        if not name:
            logger.warning(f"skin name {raw!r} is empty after sanitizing")
        self.name = name
        self._is_installed = None
        self._is_in_use = None

    def invalidate(self):
        """Forget cached installed/in-use answers after the store changed"""
        if self.name:
            self._installed_snapshot.pop(self.name, None)
        self._is_installed = None
        self._is_in_use = None

    def refresh_installed(self, snapshot: Optional[Mapping[str, object]]):
        """Replace the known-installed snapshot"""
        self._installed_snapshot = dict(snapshot or {})
        self._is_installed = None
        self._is_in_use = None

    def _require_name(self) -> str:
        if not self.name:
            raise InvalidResourceError('skin handle is not bound to a valid name')
        return self.name

    def get_path(self, sub_path: Optional[str] = None) -> str:
        return self.resolver.resolve(self._require_name(), sub_path)

    def set_results(self, message: str):
        """Record a human readable outcome"""
        logger.warning(message)
        if self.reporter is not None:
            self.reporter(message)
        else:
            self.results.append(message)

    def _report(self, key: str, **params) -> str:
        message = MESSAGES[key].format(**params)
        self.set_results(message)
        return message

    # lookups

    def is_installed(self) -> bool:
        """Whether a store record exists for this skin (memoized)"""
        name = self._require_name()
        if self._is_installed is None:
            if name in self._installed_snapshot:
                self._is_installed = True
            else:
                self._is_installed = bool(self.store.exists(name))
        return self._is_installed

    def is_in_use(self) -> bool:
        """Whether anything still references this skin (memoized)"""
        name = self._require_name()
        if self._is_in_use is None:
            self._is_in_use = bool(self.store.is_in_use(name))
        return self._is_in_use

    def _probe(self, sub_path: Optional[str], mode: int) -> bool:
        path = self.get_path(sub_path)
        if PathResolver.classify(path) is PathKind.FILE:
            exists = os.path.isfile(path)
        else:
            exists = os.path.isdir(path)
        return exists and os.access(path, mode)

    def is_readable(self, sub_path: Optional[str] = None) -> bool:
        return self._probe(sub_path, os.R_OK)

    def is_writable(self, sub_path: Optional[str] = None) -> bool:
        return self._probe(sub_path, os.W_OK)

    # marker primitives

    def create_marker(self, sub_path: Optional[str] = None, report: bool = True) -> LockResult:
        """Create a single directory; no retry"""
        path = self.get_path(sub_path)
        try:
            os.mkdir(path)
        except FileExistsError:
            error = ErrorKind.DIRECTORY_EXISTS
        except OSError as e:
            logger.debug(f"mkdir {path} failed: {e}")
            error = ErrorKind.DIRECTORY_CREATE_FAILED
        else:
            return LockResult.success()

        message = MESSAGES['directory_creation_failure'].format(name=os.path.basename(path))
        if report:
            self.set_results(message)
        return LockResult.failure(error, message)

    def remove_marker(self, sub_path: Optional[str] = None) -> LockResult:
        """Remove a single empty directory; no retry"""
        path = self.get_path(sub_path)
        try:
            os.rmdir(path)
        except OSError as e:
            logger.debug(f"rmdir {path} failed: {e}")
            message = self._report('directory_deletion_failure', name=os.path.basename(path))
            return LockResult.failure(ErrorKind.DIRECTORY_REMOVE_FAILED, message)
        return LockResult.success()

    def marker_present(self) -> bool:
        return os.path.isdir(self.get_path(LOCK_DIR))

    def reconcile(self) -> bool:
        """Drop a stale `locked` flag whose marker was removed behind our back"""
        if self.locked and not self.marker_present():
            logger.warning(f"lock marker for {self.name} disappeared; marking handle unlocked")
            self.locked = False
        return self.locked

    # lock protocol

    def acquire(self) -> LockResult:
        """Create the lock marker, polling until the deadline if it is held"""
        if self.locked:
            return LockResult.success()

        name = self._require_name()
        deadline = time.monotonic() + self.timeout
        attempts = 0

        while True:
            attempts += 1
            result = self.create_marker(LOCK_DIR, report=False)
            if result:
                self.locked = True
                logger.debug(f"locked skin {name} after {attempts} attempt(s)")
                return result

            if result.error is not ErrorKind.DIRECTORY_EXISTS:
                self.set_results(result.message)
                return LockResult.failure(ErrorKind.LOCK_CREATE_FAILED, result.message)

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            time.sleep(min(self.poll_interval, remaining))

        logger.debug(f"gave up locking skin {name} after {attempts} attempt(s)")
        message = self._report('unable_to_lock_skin', name=name)
        return LockResult.failure(ErrorKind.LOCK_TIMEOUT, message)

    def release(self) -> LockResult:
        """Remove the lock marker this handle created"""
        name = self._require_name()
        if not self.locked:
            message = self._report('skin_not_locked', name=name)
            return LockResult.failure(ErrorKind.NOT_LOCKED, message)

        if self.remove_marker(LOCK_DIR):
            self.locked = False
            logger.debug(f"unlocked skin {name}")
            return LockResult.success()

        message = self._report('unable_to_unlock_the_skin_directory', name=name)
        return LockResult.failure(ErrorKind.LOCK_RELEASE_FAILED, message)

    @contextmanager
    def hold(self):
        """Hold the lock for the duration of a with-block

        A lock already held on entry is left held on exit.
        """
        owned = not self.locked
        result = self.acquire()
        if not result:
            if result.error is ErrorKind.LOCK_TIMEOUT:
                raise LockTimeoutError(result)
            raise LockAcquireError(result)

        try:
            yield self
        except BaseException:
            if owned:
                self.release()
            raise

        if owned:
            result = self.release()
            if not result:
                raise LockReleaseError(result)

    def __repr__(self):
        return f"SkinLock(name={self.name!r}, locked={self.locked})"
