"""HTTP client for the library backend's book records."""

from __future__ import annotations

from urllib.parse import quote

import httpx
import structlog

from .errors import NetworkError, ValidationError
from .models import Book, BookDraft, PendingFile

log = structlog.get_logger()


class BackendClient:
    """Shared plumbing for clients of the library REST backend.

    The origin is injected by the caller; every request goes to
    ``{origin}{api_prefix}/...``.
    """

    def __init__(
        self,
        origin: str,
        *,
        api_prefix: str = "/api",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.origin = origin.rstrip("/")
        self.api_prefix = "/" + api_prefix.strip("/") if api_prefix.strip("/") else ""
        self._client = httpx.AsyncClient(
            base_url=self.origin,
            timeout=timeout,
            transport=transport,
        )

    def _path(self, *parts: str) -> str:
        return self.api_prefix + "/" + "/".join(quote(part, safe="") for part in parts)

    async def _request(
        self, method: str, path: str, failure: str, **kwargs: object
    ) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log.warning("backend_unreachable", method=method, path=path, error=str(e))
            raise NetworkError(failure) from e

    async def _get_list(self, path: str, failure: str) -> list[dict]:
        """GET a JSON array, raising NetworkError with ``failure`` on any problem."""
        resp = await self._request("GET", path, failure)
        if not resp.is_success:
            log.warning("backend_error_status", path=path, status=resp.status_code)
            raise NetworkError(failure, status_code=resp.status_code)
        try:
            data = resp.json()
        except ValueError as e:
            raise NetworkError(failure, status_code=resp.status_code) from e
        if not isinstance(data, list):
            raise NetworkError(failure, status_code=resp.status_code)
        return data

    async def aclose(self) -> None:
        await self._client.aclose()


def _multipart(draft: BookDraft, file: PendingFile | None) -> list[tuple]:
    """Build multipart parts; text fields go in as filename-less parts."""
    parts: list[tuple] = [
        ("title", (None, draft.title)),
        ("author", (None, draft.author)),
        ("description", (None, draft.description)),
    ]
    if file is not None:
        parts.append(("cover", (file.filename, file.data, file.content_type)))
    return parts


def _save_error(resp: httpx.Response) -> Exception:
    message = None
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        message = body["error"].strip() or None
    if message and 400 <= resp.status_code < 500:
        return ValidationError(message, status_code=resp.status_code)
    return NetworkError("Failed to save book", status_code=resp.status_code)


class RemoteBookStore(BackendClient):
    """List, create, update and delete book records on the backend."""

    async def list_books(self) -> list[Book]:
        data = await self._get_list(self._path("books"), "Failed to fetch books")
        books = [Book.from_json(item) for item in data if isinstance(item, dict)]
        log.debug("books_listed", count=len(books))
        return books

    async def create_book(self, draft: BookDraft, file: PendingFile | None = None) -> Book:
        return await self._save("POST", self._path("books"), draft, file)

    async def update_book(
        self, book_id: str, draft: BookDraft, file: PendingFile | None = None
    ) -> Book:
        """Update a book; leaving ``file`` out keeps the stored cover."""
        return await self._save("PUT", self._path("books", book_id), draft, file)

    async def delete_book(self, book_id: str) -> None:
        resp = await self._request(
            "DELETE", self._path("books", book_id), "Failed to delete book"
        )
        if not resp.is_success:
            log.warning("book_delete_rejected", book_id=book_id, status=resp.status_code)
            raise NetworkError("Failed to delete book", status_code=resp.status_code)
        log.info("book_deleted", book_id=book_id)

    async def _save(
        self, method: str, path: str, draft: BookDraft, file: PendingFile | None
    ) -> Book:
        resp = await self._request(
            method, path, "Failed to save book", files=_multipart(draft, file)
        )
        if not resp.is_success:
            error = _save_error(resp)
            log.warning("book_save_rejected", method=method, path=path, status=resp.status_code)
            raise error
        try:
            data = resp.json()
        except ValueError:
            data = {}
        book = Book.from_json(data if isinstance(data, dict) else {})
        log.info("book_saved", method=method, book_id=book.id, has_cover=file is not None)
        return book
