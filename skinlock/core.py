import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from .lock import DEFAULT_POLL_INTERVAL, DEFAULT_TIMEOUT, SkinLock
from .paths import PathResolver
from .utils import get_skin_dirs, normalize_name

logger = logging.getLogger(__name__)


@dataclass
class SkinStatus:
    name: str
    installed: bool
    in_use: bool
    readable: bool
    writable: bool
    locked: bool


class SkinSet:
    """The skins under one base path, backed by one record store"""

    def __init__(self,
                 base_path: str,
                 store,
                 timeout: float = DEFAULT_TIMEOUT,
                 poll_interval: float = DEFAULT_POLL_INTERVAL,
                 progress_callback: Optional[Callable[[str], None]] = None):
        self.resolver = PathResolver(base_path)
        self.store = store
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.progress_callback = progress_callback or (lambda name: None)
        self._snapshot = None

    def snapshot(self):
        """Known-installed names, fetched once per SkinSet"""
        if self._snapshot is None:
            self._snapshot = self.store.snapshot()
        return self._snapshot

    def refresh(self):
        self._snapshot = None

    def handle(self, name: str, reporter: Optional[Callable[[str], None]] = None) -> SkinLock:
        return SkinLock(
            self.resolver,
            self.store,
            name=name,
            installed=self.snapshot(),
            timeout=self.timeout,
            poll_interval=self.poll_interval,
            reporter=reporter
        )

    def list_skins(self) -> List[str]:
        """Skin directories whose names are already normalized"""
        names = []
        for name in get_skin_dirs(self.resolver.base_path()):
            if normalize_name(name) != name:
                logger.warning(f"skipping directory {name!r}: not a valid skin name")
                continue
            names.append(name)
        return names

    def status(self, name: str) -> SkinStatus:
        skin = self.handle(name)
        return SkinStatus(
            name=skin.name,
            installed=skin.is_installed(),
            in_use=skin.is_in_use(),
            readable=skin.is_readable(),
            writable=skin.is_writable(),
            locked=skin.marker_present()
        )

    def scan(self) -> List[SkinStatus]:
        """Status of every skin directory under the base path"""
        statuses = []
        for name in self.list_skins():
            statuses.append(self.status(name))
            self.progress_callback(name)
        logger.info(f"scanned {len(statuses)} skin(s) under {self.resolver.base_path()}")
        return statuses

    def get_scan_stats(self) -> Tuple[int, int, int]:
        """Returns:
            tuple: (skin count, installed count, locked count)
        """
        statuses = self.scan()
        installed = sum(1 for s in statuses if s.installed)
        locked = sum(1 for s in statuses if s.locked)
        return len(statuses), installed, locked
