"""Utility functions for skin names and directories"""

import os
import re
import unicodedata
from typing import List

_DROP_CHARS = re.compile(r'[^\w\s-]', re.UNICODE)
_DASHES = re.compile(r'[\s-]+')


def sanitize_for_url(text: str) -> str:
    """Reduce text to a URL-safe slug: letters, digits, '_' and single dashes"""
    text = unicodedata.normalize('NFKD', text).encode('ascii', 'ignore').decode('ascii')
    text = _DROP_CHARS.sub('', text)
    text = _DASHES.sub('-', text)
    return text.strip('-')


def normalize_name(raw) -> str:
    """Normalized skin name, possibly empty"""
    if raw is None:
        return ''
    return sanitize_for_url(str(raw)).lower()


def get_skin_dirs(base_path: str) -> List[str]:
    """Names of the skin directories directly under base_path"""
    names = []
    for entry in os.scandir(base_path):
        if entry.is_dir() and not entry.name.startswith('.'):
            names.append(entry.name)
    return sorted(names)
