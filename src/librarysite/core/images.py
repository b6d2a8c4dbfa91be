"""Turn backend-relative image paths into URLs the browser can load."""

from __future__ import annotations

from typing import Final


class _NoImage:
    """Marker for "nothing to show"; templates render text instead of <img>."""

    _instance = None

    def __new__(cls) -> _NoImage:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_IMAGE"


NO_IMAGE: Final = _NoImage()

PORTRAIT_PLACEHOLDER = "/placeholder/128/128"


class ImageResolver:
    def __init__(self, origin: str) -> None:
        self.origin = origin.rstrip("/")

    def resolve(self, path: str | None) -> str | _NoImage:
        """Absolute URL for ``path``, or NO_IMAGE when there is no path."""
        if not path:
            return NO_IMAGE
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = "/" + path
        return f"{self.origin}{path}"

    def resolve_or(self, path: str | None, fallback: str = PORTRAIT_PLACEHOLDER) -> str:
        url = self.resolve(path)
        return url if url is not NO_IMAGE else fallback
