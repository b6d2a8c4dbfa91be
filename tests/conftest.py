from __future__ import annotations

import asyncio
from dataclasses import replace

import httpx
import pytest

from librarysite.core.admin import AdminScreen
from librarysite.core.content import SiteContentClient
from librarysite.core.errors import NetworkError
from librarysite.core.form import BookForm
from librarysite.core.images import ImageResolver
from librarysite.core.models import Book, BookDraft, PendingFile
from librarysite.core.previews import PreviewRegistry

ORIGIN = "http://backend.test"


class FakeBookStore:
    """In-memory stand-in for RemoteBookStore that records every call."""

    def __init__(self, books: list[Book] | None = None) -> None:
        self.books = list(books or [])
        self.calls: list[tuple] = []
        self.fail_list: Exception | None = None
        self.fail_save: Exception | None = None
        self.fail_delete: Exception | None = None
        self.save_gate: asyncio.Event | None = None
        self._next_id = len(self.books) + 1

    @property
    def mutations(self) -> list[tuple]:
        return [call for call in self.calls if call[0] != "list"]

    async def list_books(self) -> list[Book]:
        self.calls.append(("list",))
        if self.fail_list:
            raise self.fail_list
        return [replace(book) for book in self.books]

    async def create_book(self, draft: BookDraft, file: PendingFile | None = None) -> Book:
        self.calls.append(("create", replace(draft), file))
        await self._wait_and_maybe_fail()
        book = Book(
            id=str(self._next_id),
            title=draft.title,
            author=draft.author,
            description=draft.description,
            cover=f"/uploads/{file.filename}" if file else None,
        )
        self._next_id += 1
        self.books.append(book)
        return book

    async def update_book(
        self, book_id: str, draft: BookDraft, file: PendingFile | None = None
    ) -> Book:
        self.calls.append(("update", book_id, replace(draft), file))
        await self._wait_and_maybe_fail()
        for i, book in enumerate(self.books):
            if book.id == book_id:
                cover = f"/uploads/{file.filename}" if file else book.cover
                self.books[i] = Book(
                    id=book_id,
                    title=draft.title,
                    author=draft.author,
                    description=draft.description,
                    cover=cover,
                )
                return self.books[i]
        raise NetworkError("Failed to save book", status_code=404)

    async def delete_book(self, book_id: str) -> None:
        self.calls.append(("delete", book_id))
        if self.fail_delete:
            raise self.fail_delete
        self.books = [book for book in self.books if book.id != book_id]

    async def aclose(self) -> None:
        pass

    async def _wait_and_maybe_fail(self) -> None:
        if self.save_gate is not None:
            await self.save_gate.wait()
        if self.fail_save:
            raise self.fail_save


def moby_dick() -> Book:
    return Book(
        id="1",
        title="Moby Dick",
        author="Herman Melville",
        description="A whale of a tale.",
        cover="/uploads/moby.jpg",
    )


def cover_file(name: str = "cover.png", data: bytes = b"\x89PNG fake") -> PendingFile:
    return PendingFile(filename=name, content_type="image/png", data=data)


def content_client(routes: dict[str, httpx.Response]) -> SiteContentClient:
    def handler(request: httpx.Request) -> httpx.Response:
        response = routes.get(request.url.path)
        if response is None:
            return httpx.Response(404, json={"error": "not found"})
        return response

    return SiteContentClient(ORIGIN, transport=httpx.MockTransport(handler))


@pytest.fixture
def store() -> FakeBookStore:
    return FakeBookStore()


@pytest.fixture
def images() -> ImageResolver:
    return ImageResolver(ORIGIN)


@pytest.fixture
def previews() -> PreviewRegistry:
    return PreviewRegistry()


@pytest.fixture
def form(previews, images) -> BookForm:
    return BookForm(previews, images)


@pytest.fixture
def screen(store, form) -> AdminScreen:
    return AdminScreen(store, form)
