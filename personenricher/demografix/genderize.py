from typing import Optional

import requests

from ..config import DEFAULT_GENDERIZE_URL
from ..logger import StructuredLogger, get_logger
from .common import fetch_lookup, malformed, undetermined


def get_gender_by_name(
    name: str,
    base_url: str = DEFAULT_GENDERIZE_URL,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    logger: Optional[StructuredLogger] = None,
) -> str:
    """Predict gender for a given name via genderize.io.

    The service answers {"gender": "male" | "female" | null, "name": str, ...}.

    Raises ResolverError on any failure.
    """
    logger = logger or get_logger()
    body = fetch_lookup(base_url, name, "gender", session=session, timeout=timeout, logger=logger)

    gender = body.get("gender")
    if gender is None or gender == "":
        raise undetermined("gender", logger)
    if not isinstance(gender, str):
        raise malformed("gender", "gender", logger)

    logger.record_lookup_success("gender")
    return gender
