from typing import Optional

import requests

from ..config import DEFAULT_AGIFY_URL
from ..logger import StructuredLogger, get_logger
from .common import fetch_lookup, malformed, undetermined


def get_age_by_name(
    name: str,
    base_url: str = DEFAULT_AGIFY_URL,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
    logger: Optional[StructuredLogger] = None,
) -> int:
    """Estimate age for a given name via agify.io.

    The service answers {"age": int | null, "name": str}. A null or zero age
    means the service couldn't determine one.

    Raises ResolverError on any failure.
    """
    logger = logger or get_logger()
    body = fetch_lookup(base_url, name, "age", session=session, timeout=timeout, logger=logger)

    age = body.get("age")
    if age is None or age == 0:
        raise undetermined("age", logger)
    # bool is an int subclass; reject it along with floats and strings
    if isinstance(age, bool) or not isinstance(age, int) or age < 0:
        raise malformed("age", "age", logger)

    logger.record_lookup_success("age")
    return age
