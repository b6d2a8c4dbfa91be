"""In-memory bytes behind locally generated cover preview URLs."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field

import structlog

from .models import PendingFile

log = structlog.get_logger()

PREVIEW_ROUTE = "/admin/previews"


@dataclass(frozen=True)
class PreviewRef:
    """URL currently shown as the form's cover preview.

    Only refs with a ``token`` were minted by a PreviewRegistry and must be
    released; store-hosted refs carry no token.
    """

    url: str
    token: str | None = None

    @property
    def owned(self) -> bool:
        return self.token is not None

    @classmethod
    def hosted(cls, url: str) -> PreviewRef:
        return cls(url=url)


@dataclass
class _Blob:
    data: bytes
    content_type: str
    created_at: float = field(default_factory=time.time)


class PreviewRegistry:
    """Owns transient preview bytes until they are explicitly released."""

    def __init__(self, route: str = PREVIEW_ROUTE) -> None:
        self.route = route.rstrip("/")
        self._blobs: dict[str, _Blob] = {}

    def __len__(self) -> int:
        return len(self._blobs)

    def __contains__(self, token: object) -> bool:
        return token in self._blobs

    def create(self, file: PendingFile) -> PreviewRef:
        token = uuid.uuid4().hex
        self._blobs[token] = _Blob(data=file.data, content_type=file.content_type)
        log.debug("preview_created", token=token, size=len(file.data))
        return PreviewRef(url=f"{self.route}/{token}", token=token)

    def get(self, token: str) -> tuple[bytes, str] | None:
        blob = self._blobs.get(token)
        if blob is None:
            return None
        return blob.data, blob.content_type

    def release(self, ref: PreviewRef) -> None:
        if not ref.owned:
            raise ValueError(f"refusing to release store-hosted preview {ref.url}")
        if self._blobs.pop(ref.token, None) is None:
            log.warning("preview_already_released", token=ref.token)
            return
        log.debug("preview_released", token=ref.token)
