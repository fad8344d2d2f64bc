"""Shared test fixtures for presence-avatars tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from presence_avatars.protocol.identity import PresenceIdentity

_ENV_VARS = (
    "PRESENCE_AVATARS_CACHE_DIR",
    "PRESENCE_AVATARS_CACHE_LEVEL",
    "PRESENCE_AVATARS_FORMAT",
    "PRESENCE_AVATARS_REFRESH_POLICY",
)


@pytest.fixture(autouse=True)
def avatars_home(tmp_path: Path, monkeypatch) -> Path:
    """Point PRESENCE_AVATARS_HOME at a temp dir and clear other overrides."""
    home = tmp_path / "home"
    monkeypatch.setenv("PRESENCE_AVATARS_HOME", str(home))
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture()
def sample_id() -> int:
    return 80351110224678912


@pytest.fixture()
def sample_identity(sample_id) -> PresenceIdentity:
    """A migrated account with a custom avatar."""
    return PresenceIdentity(
        id=sample_id,
        username="nelly",
        display_name="Nelly",
        avatar="abc",
    )


@pytest.fixture()
def legacy_identity() -> PresenceIdentity:
    """A legacy account without a custom avatar (discriminator 12)."""
    return PresenceIdentity(
        id=53908232506183680,
        username="mason",
        discriminator=12,
    )


@pytest.fixture()
def sample_payload(sample_id) -> dict:
    """Wire payload as sent by the presence client."""
    return {
        "id": str(sample_id),
        "username": "nelly",
        "global_name": "Nelly",
        "avatar": "abc",
        "discriminator": "0",
    }
