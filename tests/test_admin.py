import asyncio

import pytest

from librarysite.core.admin import DELETE_FAILED, LOAD_FAILED, MISSING_FIELDS, SAVE_FAILED
from librarysite.core.errors import NetworkError, ValidationError
from librarysite.core.form import FormMode
from librarysite.core.models import Book, BookDraft

from conftest import cover_file, moby_dick


@pytest.mark.asyncio
async def test_activate_populates_list(screen, store):
    store.books = [moby_dick(), Book(id="2", title="Emma", author="Austen")]

    await screen.activate()

    assert len(screen.books) == len(store.books)
    assert screen.error is None
    assert not screen.loading


@pytest.mark.asyncio
async def test_activate_fetches_only_once(screen, store):
    await screen.activate()
    await screen.activate()
    assert store.calls == [("list",)]


@pytest.mark.asyncio
async def test_activate_failure_shows_banner_and_empty_list(screen, store):
    store.fail_list = NetworkError("Failed to fetch books", status_code=500)

    await screen.activate()

    assert screen.books == []
    assert screen.error == LOAD_FAILED


@pytest.mark.asyncio
async def test_successful_refresh_clears_previous_error(screen, store):
    store.fail_list = NetworkError("Failed to fetch books")
    await screen.activate()

    store.fail_list = None
    store.books = [moby_dick()]
    assert await screen.refresh()

    assert screen.error is None
    assert [book.id for book in screen.books] == ["1"]


@pytest.mark.asyncio
async def test_create_example_closes_form_and_lists_new_book(screen, store):
    await screen.activate()
    assert screen.books == []

    screen.form.open_new()
    screen.form.update_draft("Moby Dick", "Melville", "...")
    assert await screen.save()

    assert store.mutations == [("create", BookDraft("Moby Dick", "Melville", "..."), None)]
    assert screen.books == [Book(id="1", title="Moby Dick", author="Melville", description="...", cover=None)]
    assert screen.form.mode is FormMode.CLOSED


@pytest.mark.asyncio
async def test_update_sends_book_id_and_pending_file(screen, store, previews):
    store.books = [moby_dick()]
    await screen.activate()

    screen.form.open_edit(screen.books[0])
    screen.form.update_draft("Moby-Dick", "Herman Melville", "Revised")
    upload = cover_file("new.png")
    screen.form.select_file(upload)
    assert await screen.save()

    assert store.mutations == [("update", "1", BookDraft("Moby-Dick", "Herman Melville", "Revised"), upload)]
    assert screen.books[0].title == "Moby-Dick"
    assert screen.books[0].cover == "/uploads/new.png"
    assert len(previews) == 0


@pytest.mark.asyncio
async def test_edit_then_cancel_leaves_store_untouched(screen, store):
    store.books = [moby_dick()]
    await screen.activate()

    screen.form.open_edit(screen.books[0])
    screen.form.update_draft("Something else", "Nobody", "")
    screen.form.close()

    assert store.mutations == []
    assert store.books == [moby_dick()]


@pytest.mark.asyncio
async def test_failed_save_keeps_form_open_with_server_message(screen, store):
    await screen.activate()
    store.fail_save = ValidationError("A book with this title already exists", status_code=409)

    screen.form.open_new()
    screen.form.update_draft("Moby Dick", "Melville", "...")
    assert not await screen.save()

    assert screen.form.is_open
    assert screen.form.draft == BookDraft("Moby Dick", "Melville", "...")
    assert screen.form.error == "A book with this title already exists"
    assert not screen.saving
    assert screen.books == []


@pytest.mark.asyncio
async def test_failed_save_without_server_message_uses_generic_text(screen, store):
    await screen.activate()
    store.fail_save = NetworkError("connection reset")

    screen.form.open_new()
    screen.form.update_draft("Moby Dick", "Melville", "...")
    await screen.save()

    assert screen.form.error == SAVE_FAILED


@pytest.mark.asyncio
async def test_save_requires_title_and_author(screen, store):
    screen.form.open_new()
    screen.form.update_draft("  ", "Melville", "")

    assert not await screen.save()

    assert store.mutations == []
    assert screen.form.error == MISSING_FIELDS


@pytest.mark.asyncio
async def test_duplicate_save_while_in_flight_is_rejected(screen, store):
    await screen.activate()
    store.save_gate = asyncio.Event()
    screen.form.open_new()
    screen.form.update_draft("Moby Dick", "Melville", "...")

    first = asyncio.create_task(screen.save())
    while not screen.saving:
        await asyncio.sleep(0)
    assert not await screen.save()

    store.save_gate.set()
    assert await first
    assert len(store.mutations) == 1


@pytest.mark.asyncio
async def test_save_finishing_after_form_reopened_leaves_new_form_alone(screen, store):
    store.books = [moby_dick()]
    await screen.activate()
    store.save_gate = asyncio.Event()
    screen.form.open_new()
    screen.form.update_draft("Emma", "Austen", "")

    pending = asyncio.create_task(screen.save())
    while not screen.saving:
        await asyncio.sleep(0)
    screen.form.open_edit(screen.books[0])
    store.save_gate.set()
    assert await pending

    assert screen.form.mode is FormMode.EDITING
    assert screen.form.book_id == "1"
    assert [book.title for book in screen.books] == ["Moby Dick", "Emma"]


@pytest.mark.asyncio
async def test_delete_without_confirmation_does_not_call_store(screen, store):
    store.books = [moby_dick()]
    await screen.activate()

    assert not await screen.delete("1", confirmed=False)

    assert store.mutations == []
    assert len(screen.books) == 1


@pytest.mark.asyncio
async def test_confirmed_delete_refreshes_list(screen, store):
    store.books = [moby_dick(), Book(id="2", title="Emma", author="Austen")]
    await screen.activate()

    assert await screen.delete("1", confirmed=True)

    assert store.mutations == [("delete", "1")]
    assert [book.id for book in screen.books] == ["2"]


@pytest.mark.asyncio
async def test_failed_delete_keeps_list_and_sets_banner(screen, store):
    store.books = [moby_dick()]
    await screen.activate()
    store.fail_delete = NetworkError("Failed to delete book", status_code=500)
    calls_before = len(store.calls)

    assert not await screen.delete("1", confirmed=True)

    assert screen.error == DELETE_FAILED
    assert screen.books == [moby_dick()]
    assert len(store.calls) == calls_before + 1


@pytest.mark.asyncio
async def test_refresh_failure_after_save_keeps_last_good_list(screen, store):
    store.books = [moby_dick()]
    await screen.activate()
    store.fail_list = NetworkError("Failed to fetch books")

    screen.form.open_new()
    screen.form.update_draft("Emma", "Austen", "")
    assert await screen.save()

    assert screen.books == [moby_dick()]
    assert screen.error == LOAD_FAILED
    assert not screen.form.is_open


def test_unmount_releases_preview(screen, previews):
    screen.form.open_new()
    screen.form.select_file(cover_file())

    screen.unmount()

    assert len(previews) == 0
