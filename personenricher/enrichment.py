"""
Enrichment coordinator.

Runs the age, gender and nationality lookups for one name concurrently,
waits for all three, and merges them all-or-nothing.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import EnrichmentError, ResolverError
from .logger import StructuredLogger, get_logger

# Attribute name -> Enricher method name. Order fixes the order of aggregated errors.
LOOKUPS: Tuple[Tuple[str, str], ...] = (
    ("age", "get_age_by_name"),
    ("gender", "get_gender_by_name"),
    ("nationality", "get_nationality_by_name"),
)


def _run_lookup(attribute: str, lookup: Callable[[str], Any], name: str) -> Any:
    try:
        return lookup(name)
    except ResolverError:
        raise
    except Exception as e:
        raise ResolverError(attribute, str(e) or type(e).__name__) from e


def resolve_attributes(name: str, enricher, logger: Optional[StructuredLogger] = None) -> Dict[str, Any]:
    """
    Resolve age, gender and nationality for a name in parallel.

    All three lookups are submitted at once and every one runs to completion,
    even when another has already failed.

    Args:
        name: Given name to look up
        enricher: Object exposing get_age_by_name, get_gender_by_name, get_nationality_by_name
        logger: Logger for the outcome (default: global logger)

    Returns:
        Dict with keys age, gender, nationality

    Raises:
        EnrichmentError: If one or more lookups failed; .errors holds each ResolverError
    """
    logger = logger or get_logger()

    with ThreadPoolExecutor(max_workers=len(LOOKUPS), thread_name_prefix="lookup") as pool:
        futures = [
            (attribute, pool.submit(_run_lookup, attribute, getattr(enricher, method), name))
            for attribute, method in LOOKUPS
        ]

    # The executor has joined all workers; every future is done.
    results: Dict[str, Any] = {}
    errors: List[ResolverError] = []
    for attribute, future in futures:
        error = future.exception()
        if error is None:
            results[attribute] = future.result()
        elif isinstance(error, ResolverError):
            errors.append(error)
        else:
            raise error

    if errors:
        logger.record_enrichment(success=False)
        logger.warning(
            "Enrichment failed",
            name=name,
            failed=[e.attribute for e in errors],
            errors=[str(e) for e in errors],
        )
        raise EnrichmentError(errors)

    logger.record_enrichment(success=True)
    logger.debug("Enrichment complete", name=name, **results)
    return results
