"""
HTTP adapter for the person enricher.

Routes map one-to-one onto PersonService operations; each request runs on
its own worker thread and owns one transaction. Domain errors are turned
into status codes by the exception handlers registered in create_app, e.g.::

    uvicorn personenricher.api:create_app --factory
"""

from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Path, Query, Request, status
from fastapi.responses import JSONResponse

from . import __version__
from .config import Settings, load_settings
from .database import get_session_factory, init_database
from .demografix import Enricher
from .errors import (
    EnrichmentError,
    NotFoundError,
    PersonEnricherError,
    ValidationError,
)
from .logger import StructuredLogger, get_logger
from .person import Person
from .schemas import ErrorOut, PersonIn, PersonOut, PersonPage
from .service import PersonService


def get_service(request: Request) -> PersonService:
    return request.app.state.service


router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorOut},
    404: {"model": ErrorOut},
    502: {"model": ErrorOut},
}


@router.get("", response_model=PersonPage)
def list_persons(
    id: int = Query(0, ge=0),
    name: str = Query(""),
    surname: str = Query(""),
    age: int = Query(0, ge=0),
    gender: str = Query(""),
    nationality: str = Query(""),
    limit: Optional[int] = Query(None, ge=0),
    offset: int = Query(0, ge=0),
    service: PersonService = Depends(get_service),
) -> PersonPage:
    """Filtered, paginated list ordered by id. Empty or zero filters match everything."""
    person_filter = Person(
        id=id, name=name, surname=surname, age=age, gender=gender, nationality=nationality
    )
    persons, total = service.list_persons(person_filter, limit=limit, offset=offset)
    return PersonPage(persons=[PersonOut.from_person(p) for p in persons], total=total)


@router.get("/{person_id}", response_model=PersonOut, responses=ERROR_RESPONSES)
def get_person(
    person_id: int = Path(..., ge=1),
    service: PersonService = Depends(get_service),
) -> PersonOut:
    return PersonOut.from_person(service.get_person(person_id))


@router.post("", response_model=PersonOut, status_code=status.HTTP_201_CREATED, responses=ERROR_RESPONSES)
def create_person(
    person_in: PersonIn,
    service: PersonService = Depends(get_service),
) -> PersonOut:
    """Enrich and store a new person."""
    return PersonOut.from_person(service.create_person(person_in.to_person()))


@router.put("/{person_id}", response_model=PersonOut, responses=ERROR_RESPONSES)
def update_person(
    person_in: PersonIn,
    person_id: int = Path(..., ge=1),
    service: PersonService = Depends(get_service),
) -> PersonOut:
    """Replace a stored person with re-enriched data."""
    return PersonOut.from_person(service.update_person(person_id, person_in.to_person()))


@router.delete("/{person_id}", response_model=PersonOut, responses=ERROR_RESPONSES)
def delete_person(
    person_id: int = Path(..., ge=1),
    service: PersonService = Depends(get_service),
) -> PersonOut:
    """Delete a person and return the removed record."""
    return PersonOut.from_person(service.delete_person(person_id))


def _register_error_handlers(app: FastAPI, logger: StructuredLogger) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        logger.debug("Invalid person", path=request.url.path, errors=exc.errors)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": "invalid person", "errors": exc.errors},
        )

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc), "errors": []},
        )

    @app.exception_handler(EnrichmentError)
    async def enrichment_failed(request: Request, exc: EnrichmentError):
        logger.error("Failed to enrich person", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": "failed to enrich person", "errors": exc.failed_attributes},
        )

    # IntegrityError, StorageError and anything else from the core
    @app.exception_handler(PersonEnricherError)
    async def internal_error(request: Request, exc: PersonEnricherError):
        logger.error("Request failed", path=request.url.path, error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "internal server error", "errors": []},
        )


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[PersonService] = None,
    logger: Optional[StructuredLogger] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (default: read from the environment)
        service: Prebuilt PersonService; when omitted one is built from settings
            and the persons table is created if missing
        logger: Logger for request errors (default: global logger)

    Returns:
        Configured FastAPI application
    """
    settings = settings or load_settings()
    logger = logger or get_logger(
        level=settings.log_level,
        log_dir=settings.log_dir,
        enable_file=settings.log_to_file,
    )
    if service is None:
        engine = init_database(settings.database_url)
        service = PersonService(
            get_session_factory(engine),
            Enricher(settings=settings, logger=logger),
            logger=logger,
        )

    app = FastAPI(title="Person Enricher", version=__version__)
    app.state.service = service
    app.state.settings = settings

    app.include_router(router, prefix="/persons", tags=["persons"])
    _register_error_handlers(app, logger)
    return app
