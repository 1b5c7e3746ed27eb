"""
Clients for the demografix lookup services (agify.io, genderize.io, nationalize.io).

Each resolver issues a single request with no retries and either returns
one value or raises ResolverError.
"""

from typing import Optional

import requests

from ..config import Settings
from ..logger import StructuredLogger, get_logger
from .agify import get_age_by_name
from .genderize import get_gender_by_name
from .nationalize import get_nationality_by_name


class Enricher:
    """Bundles the three resolvers against configured endpoints and one shared HTTP session."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.settings = settings or Settings()
        self.session = session or requests.Session()
        self.logger = logger or get_logger()

    def get_age_by_name(self, name: str) -> int:
        return get_age_by_name(
            name,
            base_url=self.settings.agify_url,
            session=self.session,
            timeout=self.settings.lookup_timeout,
            logger=self.logger,
        )

    def get_gender_by_name(self, name: str) -> str:
        return get_gender_by_name(
            name,
            base_url=self.settings.genderize_url,
            session=self.session,
            timeout=self.settings.lookup_timeout,
            logger=self.logger,
        )

    def get_nationality_by_name(self, name: str) -> str:
        return get_nationality_by_name(
            name,
            base_url=self.settings.nationalize_url,
            session=self.session,
            timeout=self.settings.lookup_timeout,
            logger=self.logger,
        )

    def close(self):
        self.session.close()


__all__ = [
    "Enricher",
    "get_age_by_name",
    "get_gender_by_name",
    "get_nationality_by_name",
]
