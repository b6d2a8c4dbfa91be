"""Data models for library records returned by the backend."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Book:
    id: str
    title: str = ""
    author: str = ""
    description: str = ""
    cover: str | None = None

    @classmethod
    def from_json(cls, data: dict) -> Book:
        return cls(
            id=str(data.get("_id", "")),
            title=data.get("title") or "",
            author=data.get("author") or "",
            description=data.get("description") or "",
            cover=data.get("cover") or None,
        )


@dataclass
class BookDraft:
    """Editable fields of a book that has not been saved yet."""

    title: str = ""
    author: str = ""
    description: str = ""

    @classmethod
    def from_book(cls, book: Book) -> BookDraft:
        return cls(title=book.title, author=book.author, description=book.description)

    def missing_fields(self) -> list[str]:
        return [name for name in ("title", "author") if not getattr(self, name).strip()]


@dataclass
class PendingFile:
    """A cover image picked by the operator but not yet sent to the store."""

    filename: str
    content_type: str
    data: bytes


@dataclass
class AlumniMember:
    id: str
    name: str = ""
    designation: str = ""
    batch: str = ""
    image: str | None = None

    @classmethod
    def from_json(cls, data: dict) -> AlumniMember:
        return cls(
            id=str(data.get("_id", "")),
            name=data.get("name") or "",
            designation=data.get("designation") or "",
            batch=str(data.get("batch") or ""),
            image=data.get("image") or None,
        )


@dataclass
class AdvisoryMember:
    name: str = ""
    description: str = ""
    image: str | None = None

    @classmethod
    def from_json(cls, data: dict) -> AdvisoryMember:
        return cls(
            name=data.get("name") or "",
            description=data.get("description") or "",
            image=data.get("image") or None,
        )


@dataclass
class TeamMember:
    name: str = ""
    role: str = ""
    description: str = ""
    image: str | None = None

    @classmethod
    def from_json(cls, data: dict) -> TeamMember:
        return cls(
            name=data.get("name") or "",
            role=data.get("role") or "",
            description=data.get("description") or "",
            image=data.get("image") or None,
        )


@dataclass(frozen=True)
class Testimonial:
    quote: str
    name: str
    detail: str = ""
