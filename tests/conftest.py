"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from pointbridge.core.config import LocalAuthSettings


class FakeClock:
    """Controllable wall clock for expiry and TTL tests."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def local_auth_settings() -> LocalAuthSettings:
    return LocalAuthSettings(
        admin_email="admin@rac-rewards.com",
        admin_password="admin123!",
        session_ttl_seconds=3600,
    )
