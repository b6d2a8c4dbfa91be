"""Listings and fixed copy for the public pages."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from .models import AdvisoryMember, AlumniMember, Testimonial, TeamMember
from .store import BackendClient

log = structlog.get_logger()

ADDRESS_LINES = ("Dina Patil Estate, Station Road,", "Bhandup (W)", "Mumbai 400078")
PHONE = "+91 - 704572536"
COPYRIGHT = (
    "Late Dina Bama Patil Pratishthan's DINA BAMA PATIL LIBRARY & STUDY ROOM. "
    "All rights reserved."
)

NAV_ITEMS = (
    ("/", "Home"),
    ("/about", "About Us"),
    ("/alumni", "Alumni"),
    ("/contact", "Contact Us"),
    ("/admin/books", "Books Admin"),
)

SOCIAL_LINKS = (
    ("Instagram", "https://www.instagram.com/dina_bama_patil_library"),
    ("YouTube", "https://www.youtube.com/channel/UC7UfKIVmVr3RU6KaNu7tcGQ"),
    ("WhatsApp", "https://wa.me/message/WTVLGDI34HX5H1"),
    ("Telegram", "https://t.me/dinabamapatillibraryofficial"),
)

FEATURES = (
    ("Extensive Collection", "Access thousands of books, journals, and research papers."),
    ("Community Events", "Join book clubs, workshops, and literary discussions."),
    ("Easy Reservations", "Reserve books online and pick them up at your convenience."),
    ("Special Programs", "Enjoy reading programs for all ages and interests."),
)

TESTIMONIALS = (
    Testimonial(
        quote="A quiet, well-kept study room that helped me prepare for my exams.",
        name="Library member",
        detail="Competitive exam aspirant",
    ),
    Testimonial(
        quote="The staff always find the book I am looking for, often before I finish asking.",
        name="Library member",
        detail="Degree student",
    ),
    Testimonial(
        quote="Our children look forward to the reading programs every week.",
        name="Parent",
        detail="Bhandup resident",
    ),
)


@dataclass
class TeamListing:
    advisory_committee: list[AdvisoryMember]
    library_team: list[TeamMember]


class SiteContentClient(BackendClient):
    """Read-only listings behind the About and Alumni pages."""

    async def list_alumni(self) -> list[AlumniMember]:
        data = await self._get_list(self._path("alumni"), "Failed to fetch alumni data")
        return [AlumniMember.from_json(item) for item in data if isinstance(item, dict)]

    async def list_advisory_committee(self) -> list[AdvisoryMember]:
        data = await self._get_list(self._path("advisoryCommittee"), "Failed to fetch data")
        return [AdvisoryMember.from_json(item) for item in data if isinstance(item, dict)]

    async def list_library_team(self) -> list[TeamMember]:
        data = await self._get_list(self._path("libraryTeam"), "Failed to fetch data")
        return [TeamMember.from_json(item) for item in data if isinstance(item, dict)]

    async def load_team(self) -> TeamListing:
        """Fetch both About-page listings in parallel; either failing fails both."""
        committee, team = await asyncio.gather(
            self.list_advisory_committee(), self.list_library_team()
        )
        log.debug("team_loaded", committee=len(committee), team=len(team))
        return TeamListing(advisory_committee=committee, library_team=team)
