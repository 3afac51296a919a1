"""
Pytest conftest.py - Shared fixtures and configuration

The application reads its settings at import time, so the test
environment (SQLite database, temporary upload directory, instant mock
provider, known JWT secret) is put in place before anything from
``photomap`` is imported.
"""

import asyncio
import io
import os
import tempfile
from typing import Callable, Dict, Iterator, Optional

import pytest

_TEST_ROOT = tempfile.mkdtemp(prefix="photomap-tests-")

os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/test.sqlite"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["VISION_PROVIDER"] = "mock"
os.environ["MOCK_PROVIDER_DELAY"] = "0"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["AUTO_CREATE_TABLES"] = "true"

from fastapi.testclient import TestClient  # noqa: E402
from PIL import ExifTags, Image  # noqa: E402
from PIL.TiffImagePlugin import IFDRational  # noqa: E402

from photomap.core.security import create_access_token  # noqa: E402
from photomap.main import app  # noqa: E402
from photomap.models import Base  # noqa: E402
from photomap.services.database import engine  # noqa: E402
from photomap.services.vision import VisionProvider  # noqa: E402

ALICE = "user-alice"
BOB = "user-bob"


# =============================================================================
# PYTEST HOOKS
# =============================================================================

def pytest_collection_modifyitems(config, items):
    """Mark tests that go through the HTTP app as integration tests."""
    for item in items:
        if "client" in getattr(item, "fixturenames", ()):
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

async def _reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def fresh_db() -> None:
    """Empty database for each test."""
    asyncio.run(_reset_schema())


# =============================================================================
# API FIXTURES
# =============================================================================

@pytest.fixture
def client(fresh_db) -> Iterator[TestClient]:
    """
    TestClient with the application lifespan running.

    Background tasks complete before each request call returns, so
    enrichment outcomes are visible to the very next request.
    """
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(user_id: str) -> Dict[str, str]:
    """Authorization header carrying a token for ``user_id``."""
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def alice_headers() -> Dict[str, str]:
    return auth_headers(ALICE)


@pytest.fixture
def bob_headers() -> Dict[str, str]:
    return auth_headers(BOB)


class FailingProvider(VisionProvider):
    """Provider that raises the given exception on every call."""

    name = "failing"

    def __init__(self, exc: Exception) -> None:
        self.exc = exc
        self.calls = 0

    def describe_image(self, ref: str) -> str:
        self.calls += 1
        raise self.exc


@pytest.fixture
def use_provider(monkeypatch) -> Callable[[VisionProvider], VisionProvider]:
    """Swap the application's vision provider for the duration of a test."""

    def _use(provider: VisionProvider) -> VisionProvider:
        monkeypatch.setattr(app.state.enrichment, "provider", provider)
        return provider

    return _use


# =============================================================================
# DATA FIXTURES
# =============================================================================

def _to_dms(value: float):
    value = abs(value)
    degrees = int(value)
    minutes_full = (value - degrees) * 60
    minutes = int(minutes_full)
    seconds = round((minutes_full - minutes) * 60, 4)
    return (
        IFDRational(degrees, 1),
        IFDRational(minutes, 1),
        IFDRational(int(round(seconds * 10000)), 10000),
    )


def make_jpeg(lat: Optional[float] = None, lng: Optional[float] = None) -> bytes:
    """
    Build a small JPEG, optionally with an EXIF GPS position.

    Negative values are written with the S / W hemisphere references,
    the way cameras store them.
    """
    if lat is None or lng is None:
        return make_jpeg_with_gps_ifd(None)

    return make_jpeg_with_gps_ifd({
        1: "S" if lat < 0 else "N",
        2: _to_dms(lat),
        3: "W" if lng < 0 else "E",
        4: _to_dms(lng),
    })


def make_jpeg_with_gps_ifd(gps_ifd: Optional[dict]) -> bytes:
    """Build a small JPEG carrying ``gps_ifd`` verbatim as its GPS IFD."""
    image = Image.new("RGB", (32, 32), color="green")
    buffer = io.BytesIO()

    if gps_ifd is None:
        image.save(buffer, format="JPEG")
        return buffer.getvalue()

    exif = Image.Exif()
    exif[ExifTags.IFD.GPSInfo] = gps_ifd
    image.save(buffer, format="JPEG", exif=exif)
    return buffer.getvalue()


# Cameras without a satellite fix write 0/0 rationals
NO_FIX_GPS = {
    1: "N",
    2: (IFDRational(0, 0),) * 3,
    3: "E",
    4: (IFDRational(0, 0),) * 3,
}


@pytest.fixture
def eiffel_jpeg() -> bytes:
    """JPEG geotagged at the Eiffel Tower."""
    return make_jpeg(48.8584, 2.2945)


@pytest.fixture
def untagged_jpeg() -> bytes:
    """Valid JPEG without any GPS data."""
    return make_jpeg()


@pytest.fixture
def upload_photo(client, eiffel_jpeg) -> Callable[..., dict]:
    """Upload a photo as the given user and return the response body."""

    def _upload(headers: Dict[str, str], data: Optional[bytes] = None) -> dict:
        response = client.post(
            "/api/v1/photos",
            files={"file": ("photo.jpg", data or eiffel_jpeg, "image/jpeg")},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()

    return _upload
