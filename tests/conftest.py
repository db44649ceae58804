"""Shared fixtures for skinlock tests."""

import pytest

from skinlock.lock import SkinLock
from skinlock.paths import PathResolver
from skinlock.store import ManifestStore


@pytest.fixture
def base_path(tmp_path):
    path = tmp_path / "skins"
    path.mkdir()
    return path


@pytest.fixture
def store(tmp_path):
    return ManifestStore(str(tmp_path / "skins.yml"))


@pytest.fixture
def resolver(base_path):
    return PathResolver(str(base_path))


@pytest.fixture
def make_skin(resolver, store):
    """Factory for handles with short lock timings."""

    def _make(name="sample", timeout=0.3, poll_interval=0.05, **kwargs):
        return SkinLock(resolver, store, name=name, timeout=timeout, poll_interval=poll_interval, **kwargs)

    return _make
