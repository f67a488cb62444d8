"""SDK root resolution."""

from __future__ import annotations

import logging
from pathlib import Path

from android_sdk_installer.platforms import get_platform

logger = logging.getLogger(__name__)


def resolve_default_root(os_identity: str | None = None) -> Path:
    """Determine and create the conventional SDK root for a host.

    Args:
        os_identity: A sys.platform value. Defaults to the running host.

    Returns:
        The SDK root, which exists on return.

    Raises:
        UnsupportedPlatformError: If the host is not supported. Nothing is
            created in that case.
    """
    sdk_root = get_platform(os_identity).default_sdk_root
    sdk_root.mkdir(parents=True, exist_ok=True)
    logger.debug("Using default SDK root %s", sdk_root)
    return sdk_root
