"""
SpawnAlarm version information, shared by the health endpoint and startup logs.
"""

from typing import Optional

APP_NAME = "SpawnAlarm"
APP_DESCRIPTION = "Spawn window alarms for timed and weather-gated gathering nodes"

VERSION_PARTS = (1, 0, 0)
PRE_RELEASE: Optional[str] = None  # e.g. "rc1"

VERSION = ".".join(str(part) for part in VERSION_PARTS)


def get_version() -> str:
    return VERSION


def get_full_version() -> str:
    """Version including the pre-release suffix, e.g. ``1.1.0-rc1``."""
    if PRE_RELEASE:
        return f"{VERSION}-{PRE_RELEASE}"
    return VERSION


def get_app_info() -> str:
    """Application name and version, e.g. ``SpawnAlarm v1.0.0``."""
    return f"{APP_NAME} v{get_version()}"
