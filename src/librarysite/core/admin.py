"""The books admin screen: listing, delete flow and save flow."""

from __future__ import annotations

import structlog

from .errors import LoadFailure, StoreError, ValidationError
from .form import BookForm, FormMode
from .models import Book
from .store import RemoteBookStore

log = structlog.get_logger()

LOAD_FAILED = "Failed to load books"
DELETE_FAILED = "Failed to delete book"
SAVE_FAILED = "Failed to save book"
MISSING_FIELDS = "Title and author are required"


def display_message(error: StoreError, fallback: str) -> str:
    """Text shown to the operator for ``error``.

    Only validation failures carry a message worth showing verbatim.
    """
    if isinstance(error, ValidationError):
        return error.message
    return fallback


class AdminScreen:
    def __init__(self, store: RemoteBookStore, form: BookForm) -> None:
        self.store = store
        self.form = form
        self.books: list[Book] = []
        self.error: str | None = None
        self.loading = False
        self.saving = False
        self.deleting = False
        self.activated = False

    def find(self, book_id: str) -> Book | None:
        return next((book for book in self.books if book.id == book_id), None)

    async def activate(self) -> None:
        if self.activated:
            return
        self.activated = True
        await self.refresh()

    async def refresh(self) -> bool:
        """Replace the list with the store's current one.

        On failure the previous list stays in place and the banner is set.
        """
        self.loading = True
        try:
            books = await self.store.list_books()
        except StoreError as e:
            failure = LoadFailure(e)
            log.warning("books_load_failed", error=str(failure))
            self.error = display_message(failure, LOAD_FAILED)
            return False
        finally:
            self.loading = False
        self.books = books
        self.error = None
        log.info("books_loaded", count=len(books))
        return True

    async def delete(self, book_id: str, *, confirmed: bool) -> bool:
        if not confirmed:
            log.info("book_delete_cancelled", book_id=book_id)
            return False
        if self.deleting:
            log.warning("book_delete_ignored_in_flight", book_id=book_id)
            return False
        self.deleting = True
        try:
            await self.store.delete_book(book_id)
        except StoreError as e:
            log.warning("book_delete_failed", book_id=book_id, error=str(e))
            self.error = display_message(e, DELETE_FAILED)
            return False
        finally:
            self.deleting = False
        await self.refresh()
        return True

    async def save(self) -> bool:
        form = self.form
        if self.saving:
            log.warning("book_save_ignored_in_flight", book_id=form.book_id)
            return False
        if not form.is_open:
            return False
        if form.draft.missing_fields():
            form.error = MISSING_FIELDS
            return False

        generation = form.generation
        editing = form.mode is FormMode.EDITING
        book_id = form.book_id
        form.error = None
        self.saving = True
        try:
            if editing:
                await self.store.update_book(book_id, form.draft, form.pending_file)
            else:
                await self.store.create_book(form.draft, form.pending_file)
        except StoreError as e:
            log.warning("book_save_failed", book_id=book_id, error=str(e))
            message = display_message(e, SAVE_FAILED)
            if form.generation == generation:
                form.error = message
            else:
                self.error = message
            return False
        finally:
            self.saving = False

        # The operator may have closed or reopened the form while we waited.
        if form.generation == generation:
            form.close()
        await self.refresh()
        return True

    def unmount(self) -> None:
        self.form.close()
