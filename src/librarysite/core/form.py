"""State of the add/edit book form on the admin screen."""

from __future__ import annotations

import enum

import structlog

from .images import NO_IMAGE, ImageResolver
from .models import Book, BookDraft, PendingFile
from .previews import PreviewRef, PreviewRegistry

log = structlog.get_logger()


class FormMode(enum.Enum):
    CLOSED = "closed"
    CREATING = "creating"
    EDITING = "editing"


class BookForm:
    """Closed, creating a new book, or editing an existing one.

    The form owns at most one transient preview at a time. Every path that
    replaces or drops the preview goes through ``_set_preview`` so an owned
    preview is released exactly once and a store-hosted one never is.
    """

    def __init__(self, previews: PreviewRegistry, images: ImageResolver) -> None:
        self.previews = previews
        self.images = images
        self.mode = FormMode.CLOSED
        self.book_id: str | None = None
        self.draft = BookDraft()
        self.pending_file: PendingFile | None = None
        self.preview: PreviewRef | None = None
        self.error: str | None = None
        self.generation = 0

    @property
    def is_open(self) -> bool:
        return self.mode is not FormMode.CLOSED

    @property
    def title(self) -> str:
        return "Edit Book" if self.mode is FormMode.EDITING else "Add New Book"

    def open_new(self) -> None:
        self._reset()
        self.mode = FormMode.CREATING
        log.debug("form_opened", mode=self.mode.value)

    def open_edit(self, book: Book) -> None:
        self._reset()
        self.mode = FormMode.EDITING
        self.book_id = book.id
        self.draft = BookDraft.from_book(book)
        url = self.images.resolve(book.cover)
        if url is not NO_IMAGE:
            self._set_preview(PreviewRef.hosted(url))
        log.debug("form_opened", mode=self.mode.value, book_id=book.id)

    def update_draft(self, title: str, author: str, description: str) -> None:
        if not self.is_open:
            return
        self.draft = BookDraft(title=title, author=author, description=description)

    def select_file(self, file: PendingFile) -> None:
        if not self.is_open:
            raise RuntimeError("cannot select a cover while the form is closed")
        self.pending_file = file
        self._set_preview(self.previews.create(file))

    def close(self) -> None:
        was_open = self.is_open
        self._reset()
        if was_open:
            log.debug("form_closed")

    def _reset(self) -> None:
        self._set_preview(None)
        self.mode = FormMode.CLOSED
        self.book_id = None
        self.draft = BookDraft()
        self.pending_file = None
        self.error = None
        self.generation += 1

    def _set_preview(self, ref: PreviewRef | None) -> None:
        previous, self.preview = self.preview, ref
        if previous is not None and previous.owned and previous != ref:
            self.previews.release(previous)
