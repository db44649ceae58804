"""Path resolution for skin directories"""

import os
from enum import Enum
from typing import Callable, Optional, Union


class PathKind(Enum):
    FILE = 'file'
    DIRECTORY = 'directory'


class PathResolver:
    """Maps a skin name and optional sub-path to a path under the base directory"""

    def __init__(self, base_path: Union[str, os.PathLike, Callable[[], str]]):
        self._base_path = base_path

    def base_path(self) -> str:
        """Return the configured base directory, re-read on every call"""
        if callable(self._base_path):
            return str(self._base_path())
        return os.fspath(self._base_path)

    def resolve(self, name: str, sub_path: Optional[str] = None) -> str:
        """Build '<base>/<name>[/<sub_path>]'; name must already be normalized"""
        path = f"{self.base_path()}/{name}"
        if sub_path:
            path = f"{path}/{sub_path}"
        return path

    @staticmethod
    def classify(path: str) -> PathKind:
        """Guess whether path names a file from an extension on its last segment"""
        segment = path.rstrip('/').rsplit('/', 1)[-1]
        dot = segment.rfind('.')
        if dot != -1 and dot < len(segment) - 1:
            return PathKind.FILE
        return PathKind.DIRECTORY
