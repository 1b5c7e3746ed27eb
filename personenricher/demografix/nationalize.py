from typing import Optional

import requests

from ..config import DEFAULT_NATIONALIZE_URL
from ..logger import StructuredLogger, get_logger
from .common import fetch_lookup, malformed, undetermined


def get_nationality_by_name(
    name: str,
    base_url: str = DEFAULT_NATIONALIZE_URL,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    logger: Optional[StructuredLogger] = None,
) -> str:
    """Predict nationality for a given name via nationalize.io.

    The service answers {"name": str, "country": [{"country_id": str, "probability": float}, ...]}
    ranked by probability. The first entry is taken as is, without re-ranking.

    Raises ResolverError on any failure.
    """
    logger = logger or get_logger()
    body = fetch_lookup(base_url, name, "nationality", session=session, timeout=timeout, logger=logger)

    countries = body.get("country")
    if countries is None or countries == []:
        raise undetermined("nationality", logger)
    if not isinstance(countries, list) or not isinstance(countries[0], dict):
        raise malformed("nationality", "country", logger)

    country_id = countries[0].get("country_id")
    if country_id is None or country_id == "":
        raise undetermined("nationality", logger)
    if not isinstance(country_id, str):
        raise malformed("nationality", "country_id", logger)

    logger.record_lookup_success("nationality")
    return country_id
