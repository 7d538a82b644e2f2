"""Event details domain service - the singleton record shown on the public page."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .exceptions import BannerNotFound, InvalidAttachment, InvalidInput
from .models import Banner, EventDetails
from .ports import EventDetailsRepository
from .registration import DEFAULT_ADMIN, utcnow

logger = logging.getLogger(__name__)

ALLOWED_BANNER_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"})


@dataclass
class EventDetailsService:
    repository: EventDetailsRepository
    max_banner_bytes: int = 5 * 1024 * 1024
    now: Callable = utcnow

    def get(self) -> EventDetails:
        """Current details; the record is created with defaults on first read."""
        return self.repository.get_or_create()

    def update(self, date: str, time: str, venue: str, updated_by: str | None = None) -> EventDetails:
        date, time, venue = ((value or "").strip() for value in (date, time, venue))
        if not date or not time or not venue:
            raise InvalidInput("Date, time, and venue are required")

        updated_by = updated_by or DEFAULT_ADMIN
        details = self.repository.update(date, time, venue, updated_by)
        logger.info("Event details updated by %s", updated_by)
        return details

    def get_banner(self) -> Banner:
        banner = self.repository.get_or_create().banner
        if banner is None or not banner.data:
            raise BannerNotFound("Banner image not found")
        return banner

    def set_banner(self, data: bytes, content_type: str, updated_by: str | None = None) -> EventDetails:
        if content_type not in ALLOWED_BANNER_TYPES:
            raise InvalidAttachment("Invalid file type. Only image files are allowed.")
        if not data:
            raise InvalidAttachment("Banner image is empty")
        if len(data) > self.max_banner_bytes:
            raise InvalidAttachment("Banner image is too large", too_large=True)

        updated_by = updated_by or DEFAULT_ADMIN
        banner = Banner(data=data, content_type=content_type, size=len(data), uploaded_at=self.now())
        details = self.repository.set_banner(banner, updated_by)
        logger.info("Event banner uploaded by %s (%d bytes)", updated_by, banner.size)
        return details

    def delete_banner(self, updated_by: str | None = None) -> EventDetails:
        self.get_banner()
        details = self.repository.clear_banner(updated_by or DEFAULT_ADMIN)
        logger.info("Event banner removed by %s", updated_by or DEFAULT_ADMIN)
        return details
