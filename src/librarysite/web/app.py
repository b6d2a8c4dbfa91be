"""FastAPI web application for the library site."""

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote

import structlog
import uvicorn
from fastapi import APIRouter, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from .. import __version__
from ..config import Settings, configure_logging
from ..core import content as site
from ..core.admin import AdminScreen
from ..core.carousel import Carousel
from ..core.content import SiteContentClient
from ..core.errors import StoreError
from ..core.form import BookForm
from ..core.images import NO_IMAGE, PORTRAIT_PLACEHOLDER, ImageResolver
from ..core.models import PendingFile
from ..core.previews import PREVIEW_ROUTE, PreviewRegistry
from ..core.store import RemoteBookStore

log = structlog.get_logger()

WEB_DIR = Path(__file__).parent
STATIC_DIR = WEB_DIR / "static"
TEMPLATES_DIR = WEB_DIR / "templates"
SESSION_COOKIE = "admin_session"
ADMIN_PATH = "/admin/books"

TEAM_LOAD_FAILED = "Failed to load team data. Please try again later."
NOT_AN_IMAGE = "Cover must be an image"
UPLOAD_TOO_LARGE = "Cover image is too large"


def path_segment(value: object) -> str:
    """Escape a value for use as one URL path segment."""
    return quote(str(value), safe="")


templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["path_segment"] = path_segment
templates.env.globals.update(
    nav_items=site.NAV_ITEMS,
    social_links=site.SOCIAL_LINKS,
    address_lines=site.ADDRESS_LINES,
    phone=site.PHONE,
    copyright=site.COPYRIGHT,
    no_image=NO_IMAGE,
    portrait_placeholder=PORTRAIT_PLACEHOLDER,
)


class SessionLimitReached(Exception):
    pass


class UploadRejected(Exception):
    pass


@dataclass
class AdminSession:
    screen: AdminScreen
    last_seen: float = field(default_factory=time.time)


class AdminSessions:
    """In-memory admin screens keyed by cookie; expiry unmounts the screen."""

    def __init__(self, ttl: int, max_sessions: int) -> None:
        self.ttl = ttl
        self.max_sessions = max_sessions
        self._sessions: dict[str, AdminSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def clean_expired(self) -> None:
        now = time.time()
        expired = [sid for sid, s in self._sessions.items() if now - s.last_seen > self.ttl]
        for sid in expired:
            self.discard(sid)

    def get(self, session_id: str) -> AdminSession | None:
        session = self._sessions.get(session_id)
        if not session:
            return None
        if time.time() - session.last_seen > self.ttl:
            self.discard(session_id)
            return None
        session.last_seen = time.time()
        return session

    def add(self, session: AdminSession) -> str:
        self.clean_expired()
        if len(self._sessions) >= self.max_sessions:
            raise SessionLimitReached()
        session_id = uuid.uuid4().hex
        self._sessions[session_id] = session
        return session_id

    def discard(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session:
            session.screen.unmount()
            log.debug("admin_session_closed", session_id=session_id)

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.discard(session_id)


router = APIRouter()


@router.get("/health")
async def health(request: Request):
    settings: Settings = request.app.state.settings
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "environment": settings.environment,
        "sessions_active": len(request.app.state.sessions),
        "previews_active": len(request.app.state.previews),
    }


# --- Public pages ---


@router.get("/", response_class=HTMLResponse)
async def home(request: Request, arrivals: int = 0):
    store: RemoteBookStore = request.app.state.store
    books = []
    error = None
    try:
        books = await store.list_books()
    except StoreError as e:
        log.warning("new_arrivals_failed", error=str(e))
        error = str(e)
    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "carousel": Carousel(books, offset=arrivals),
            "error": error,
            "images": request.app.state.images,
            "features": site.FEATURES,
            "testimonials": site.TESTIMONIALS,
        },
    )


@router.get("/about", response_class=HTMLResponse)
async def about(request: Request):
    content: SiteContentClient = request.app.state.content
    team = None
    error = None
    try:
        team = await content.load_team()
    except StoreError as e:
        log.warning("team_load_failed", error=str(e))
        error = TEAM_LOAD_FAILED
    return templates.TemplateResponse(
        request,
        "about.html",
        {"team": team, "error": error, "images": request.app.state.images},
    )


@router.get("/alumni", response_class=HTMLResponse)
async def alumni(request: Request):
    content: SiteContentClient = request.app.state.content
    members = []
    error = None
    try:
        members = await content.list_alumni()
    except StoreError as e:
        log.warning("alumni_load_failed", error=str(e))
        error = str(e)
    return templates.TemplateResponse(
        request,
        "alumni.html",
        {"alumni": members, "error": error, "images": request.app.state.images},
    )


@router.get("/contact", response_class=HTMLResponse)
async def contact(request: Request):
    return templates.TemplateResponse(request, "contact.html", {})


@router.get("/placeholder/{width}/{height}")
async def placeholder(width: int, height: int):
    width = min(max(width, 1), 1024)
    height = min(max(height, 1), 1024)
    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}">'
        f'<rect width="100%" height="100%" fill="#e5e7eb"/>'
        f'<circle cx="50%" cy="40%" r="{min(width, height) // 5}" fill="#9ca3af"/>'
        f"</svg>"
    )
    return Response(
        content=svg,
        media_type="image/svg+xml",
        headers={"Cache-Control": "public, max-age=86400"},
    )


# --- Books admin ---


async def _admin_session(request: Request) -> tuple[str, AdminSession]:
    sessions: AdminSessions = request.app.state.sessions
    session_id = request.cookies.get(SESSION_COOKIE)
    session = sessions.get(session_id) if session_id else None
    if session:
        return session_id, session

    form = BookForm(request.app.state.previews, request.app.state.images)
    session = AdminSession(screen=AdminScreen(request.app.state.store, form))
    session_id = sessions.add(session)
    log.info("admin_session_opened", session_id=session_id, active=len(sessions))
    await session.screen.activate()
    return session_id, session


def _with_cookie(response: Response, session_id: str) -> Response:
    response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return response


def _back_to_admin(session_id: str) -> Response:
    return _with_cookie(RedirectResponse(url=ADMIN_PATH, status_code=303), session_id)


async def _read_upload(upload: UploadFile | None, max_bytes: int) -> PendingFile | None:
    if upload is None or not upload.filename:
        return None
    content_type = upload.content_type or ""
    if not content_type.startswith("image/"):
        raise UploadRejected(NOT_AN_IMAGE)
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise UploadRejected(UPLOAD_TOO_LARGE)
    return PendingFile(filename=upload.filename, content_type=content_type, data=data)


@router.get(ADMIN_PATH, response_class=HTMLResponse)
async def admin_books(request: Request):
    session_id, session = await _admin_session(request)
    screen = session.screen
    response = templates.TemplateResponse(
        request,
        "admin_books.html",
        {"screen": screen, "form": screen.form, "images": request.app.state.images},
    )
    return _with_cookie(response, session_id)


@router.post(ADMIN_PATH + "/new")
async def admin_new_book(request: Request):
    session_id, session = await _admin_session(request)
    session.screen.form.open_new()
    return _back_to_admin(session_id)


@router.post(ADMIN_PATH + "/{book_id:path}/edit")
async def admin_edit_book(request: Request, book_id: str):
    session_id, session = await _admin_session(request)
    screen = session.screen
    book = screen.find(book_id)
    if book is None:
        screen.error = "Book not found"
    else:
        screen.form.open_edit(book)
    return _back_to_admin(session_id)


@router.post(ADMIN_PATH + "/form/cover")
async def admin_select_cover(
    request: Request,
    title: str = Form(""),
    author: str = Form(""),
    description: str = Form(""),
    cover: UploadFile | None = File(None),
):
    session_id, session = await _admin_session(request)
    form = session.screen.form
    if not form.is_open:
        return _back_to_admin(session_id)
    form.update_draft(title, author, description)
    try:
        pending = await _read_upload(cover, request.app.state.settings.max_upload_bytes)
    except UploadRejected as e:
        form.error = str(e)
        return _back_to_admin(session_id)
    if pending is not None:
        form.error = None
        form.select_file(pending)
    return _back_to_admin(session_id)


@router.post(ADMIN_PATH + "/form/save")
async def admin_save_book(
    request: Request,
    title: str = Form(""),
    author: str = Form(""),
    description: str = Form(""),
    cover: UploadFile | None = File(None),
):
    session_id, session = await _admin_session(request)
    screen = session.screen
    form = screen.form
    if not form.is_open:
        return _back_to_admin(session_id)
    if screen.saving:
        log.warning("book_save_ignored_in_flight", session_id=session_id)
        return _back_to_admin(session_id)
    form.update_draft(title, author, description)
    try:
        pending = await _read_upload(cover, request.app.state.settings.max_upload_bytes)
    except UploadRejected as e:
        form.error = str(e)
        return _back_to_admin(session_id)
    if pending is not None:
        form.select_file(pending)
    await screen.save()
    return _back_to_admin(session_id)


@router.post(ADMIN_PATH + "/form/cancel")
async def admin_cancel_form(request: Request):
    session_id, session = await _admin_session(request)
    session.screen.form.close()
    return _back_to_admin(session_id)


@router.get(ADMIN_PATH + "/{book_id:path}/delete", response_class=HTMLResponse)
async def admin_confirm_delete(request: Request, book_id: str):
    session_id, session = await _admin_session(request)
    response = templates.TemplateResponse(
        request,
        "confirm_delete.html",
        {"book_id": book_id, "book": session.screen.find(book_id)},
    )
    return _with_cookie(response, session_id)


@router.post(ADMIN_PATH + "/{book_id:path}/delete")
async def admin_delete_book(request: Request, book_id: str, confirm: str = Form("")):
    session_id, session = await _admin_session(request)
    await session.screen.delete(book_id, confirmed=confirm == "yes")
    return _back_to_admin(session_id)


@router.get(PREVIEW_ROUTE + "/{token}")
async def admin_preview(request: Request, token: str):
    blob = request.app.state.previews.get(token)
    if blob is None:
        raise HTTPException(status_code=404, detail="Preview not found")
    data, content_type = blob
    return Response(content=data, media_type=content_type, headers={"Cache-Control": "no-store"})


def create_app(
    settings: Settings | None = None,
    *,
    store: RemoteBookStore | None = None,
    content: SiteContentClient | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    client_options = {"api_prefix": settings.api_prefix, "timeout": settings.api_timeout}
    store = store or RemoteBookStore(settings.api_origin, **client_options)
    content = content or SiteContentClient(settings.api_origin, **client_options)
    sessions = AdminSessions(ttl=settings.session_ttl, max_sessions=settings.max_sessions)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("site_starting", api_origin=settings.api_origin, environment=settings.environment)
        try:
            yield
        finally:
            sessions.close_all()
            await store.aclose()
            await content.aclose()

    app = FastAPI(title="Library Site", docs_url=None, redoc_url=None, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.content = content
    app.state.images = ImageResolver(settings.api_origin)
    app.state.previews = PreviewRegistry()
    app.state.sessions = sessions

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response

    @app.exception_handler(SessionLimitReached)
    async def session_limit(request: Request, exc: SessionLimitReached):
        log.warning("admin_session_limit", active=len(sessions))
        return JSONResponse(
            {"error": "Server is busy. Please try again in a few minutes."},
            status_code=503,
        )

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    app.include_router(router)
    return app


app = create_app()


def main():
    settings = app.state.settings
    uvicorn.run(
        "librarysite.web.app:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.environment == "dev",
    )
