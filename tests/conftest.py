"""
Root conftest.py for campus-portal tests.

Fixtures are organized by layer:
- Store fixtures (document store, repository) backed by a per-test tmp dir
- Storage fixtures (memory and local backends, attachment manager)
- Auth fixtures (settings with a fixed secret, service)
- API fixtures (app built on tmp paths, TestClient)
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pydantic import SecretStr

from campus_portal.api.fastapi import create_app
from campus_portal.app.settings import PortalSettings
from campus_portal.auth.service import AuthService
from campus_portal.auth.settings import AuthSettings
from campus_portal.db.document import DocumentStore
from campus_portal.db.repository import CollectionRepository
from campus_portal.storage.attachments import AttachmentManager
from campus_portal.storage.backends.local import LocalBackend
from campus_portal.storage.backends.memory import MemoryBackend

TEST_SECRET = "test-secret-key"


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Mark tests by directory so `-m api` / `-m security` select them."""
    for item in items:
        norm = str(item.fspath).replace("\\", "/")
        if "/tests/security/" in norm or "/tests/auth/" in norm:
            item.add_marker(pytest.mark.security)
        if "/tests/api/" in norm:
            item.add_marker(pytest.mark.api)


# =============================================================================
# STORE FIXTURES
# =============================================================================


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "db.json"


@pytest.fixture
def store(db_path) -> DocumentStore:
    return DocumentStore(db_path)


@pytest.fixture
def repo(store) -> CollectionRepository:
    return CollectionRepository(store)


class DocumentWriteFailure:
    """Stand-in for ``os.replace`` that fails moves onto one path while ``active``."""

    def __init__(self, target, replace=os.replace):
        self.target = Path(target).resolve()
        self.active = False
        self._replace = replace

    def __call__(self, src, dst, *args, **kwargs):
        if self.active and Path(dst).resolve() == self.target:
            raise OSError(28, "No space left on device")
        return self._replace(src, dst, *args, **kwargs)


@pytest.fixture
def disk_full(db_path, monkeypatch) -> DocumentWriteFailure:
    """Set ``disk_full.active = True`` to make saving the document fail."""
    failure = DocumentWriteFailure(db_path)
    monkeypatch.setattr(os, "replace", failure)
    return failure


# =============================================================================
# STORAGE FIXTURES
# =============================================================================


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def local_backend(upload_dir) -> LocalBackend:
    return LocalBackend(upload_dir, base_url="/uploads")


@pytest.fixture
def attachments(local_backend, repo) -> AttachmentManager:
    return AttachmentManager(local_backend, repo)


# =============================================================================
# AUTH FIXTURES
# =============================================================================


@pytest.fixture
def auth_settings() -> AuthSettings:
    return AuthSettings(jwt_secret=SecretStr(TEST_SECRET), jwt_lifetime_seconds=3600)


@pytest.fixture
def auth_service(repo, auth_settings) -> AuthService:
    return AuthService(repo, auth_settings)


# =============================================================================
# API FIXTURES
# =============================================================================


@pytest.fixture
def portal_settings(db_path, upload_dir) -> PortalSettings:
    return PortalSettings(db_path=db_path, upload_dir=upload_dir, cors_origins="*")


@pytest.fixture
def app(portal_settings, auth_settings):
    return create_app(settings=portal_settings, auth_settings=auth_settings)


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def uploaded_files(upload_dir):
    """Callable listing the non-hidden files currently in the upload dir."""

    def _list() -> list[str]:
        return sorted(p.name for p in upload_dir.iterdir() if p.is_file() and not p.name.startswith("."))

    return _list
