import argparse
import json

from .env import load_env

from . import __version__
from .config import Settings, load_settings
from .database import get_session_factory, init_database
from .demografix import Enricher
from .enrichment import resolve_attributes
from .errors import EnrichmentError, NotFoundError, PersonEnricherError, ValidationError
from .logger import get_logger
from .person import Person
from .service import PersonService


def build_service(settings: Settings) -> PersonService:
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir, enable_file=settings.log_to_file)
    engine = init_database(settings.database_url)
    return PersonService(get_session_factory(engine), Enricher(settings=settings, logger=logger), logger=logger)


def print_person(person: Person) -> None:
    print(json.dumps(person.to_dict(), ensure_ascii=False))


def run_operation(func, *args):
    """Run a service call, turning domain errors into a readable exit."""
    try:
        return func(*args)
    except ValidationError as e:
        lines = "\n".join(f" - {msg}" for msg in e.errors)
        raise SystemExit(f"Invalid person:\n{lines}")
    except EnrichmentError as e:
        lines = "\n".join(f" - {err}" for err in e.errors)
        raise SystemExit(f"Enrichment failed:\n{lines}")
    except NotFoundError as e:
        raise SystemExit(str(e))
    except PersonEnricherError as e:
        raise SystemExit(f"Storage failure: {e}")


def cmd_init_db(args: argparse.Namespace) -> None:
    settings = load_settings()
    init_database(settings.database_url)
    print(f"Database ready: {settings.database_url}")


def cmd_serve(args: argparse.Namespace) -> None:
    import uvicorn

    from .api import create_app

    settings = load_settings()
    host = args.host or settings.server_host
    port = args.port or settings.server_port
    app = create_app(settings)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())


def cmd_create(args: argparse.Namespace) -> None:
    service = build_service(load_settings())
    person = Person(name=args.name, surname=args.surname, patronymic=args.patronymic or "")
    print_person(run_operation(service.create_person, person))


def cmd_update(args: argparse.Namespace) -> None:
    service = build_service(load_settings())
    person = Person(name=args.name, surname=args.surname, patronymic=args.patronymic or "")
    print_person(run_operation(service.update_person, args.id, person))


def cmd_delete(args: argparse.Namespace) -> None:
    service = build_service(load_settings())
    print_person(run_operation(service.delete_person, args.id))


def cmd_get(args: argparse.Namespace) -> None:
    service = build_service(load_settings())
    print_person(run_operation(service.get_person, args.id))


def cmd_list(args: argparse.Namespace) -> None:
    service = build_service(load_settings())
    person_filter = Person(
        id=args.id,
        name=args.name,
        surname=args.surname,
        age=args.age,
        gender=args.gender,
        nationality=args.nationality,
    )
    persons, total = run_operation(service.list_persons, person_filter, args.limit, args.offset)
    if not persons:
        print(f"No persons found (total={total}).")
        return
    print(f"Showing {len(persons)} of {total} persons:\n")
    for person in persons:
        print(f"ID: {person.id}")
        print(f"  Name: {' '.join(p for p in (person.surname, person.name, person.patronymic) if p)}")
        print(f"  Age: {person.age or 'unknown'}")
        print(f"  Gender: {person.gender or 'unknown'}")
        print(f"  Nationality: {person.nationality or 'unknown'}")
        print()


def cmd_enrich(args: argparse.Namespace) -> None:
    settings = load_settings()
    logger = get_logger(level=settings.log_level, log_dir=settings.log_dir, enable_file=settings.log_to_file)
    enricher = Enricher(settings=settings, logger=logger)
    try:
        attributes = run_operation(resolve_attributes, args.name, enricher, logger)
    finally:
        enricher.close()
    print(json.dumps({"name": args.name, **attributes}, ensure_ascii=False))


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {value}")
    return number


def positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def main(argv=None):
    # Load .env if present (DATABASE_URL, SERVER_PORT, etc.)
    load_env()
    parser = argparse.ArgumentParser(prog="personenricher", description="Enrich persons with age, gender and nationality")
    parser.add_argument("--version", action="store_true", help="Show version")

    subparsers = parser.add_subparsers(dest="command")
    ini = subparsers.add_parser("init-db", help="Create the persons table if missing")
    ini.set_defaults(func=cmd_init_db)

    srv = subparsers.add_parser("serve", help="Run the HTTP API")
    srv.add_argument("--host", help="Bind host (default: SERVER_HOST or 0.0.0.0)")
    srv.add_argument("--port", type=positive_int, help="Bind port (default: SERVER_PORT or 8080)")
    srv.set_defaults(func=cmd_serve)

    crt = subparsers.add_parser("create", help="Enrich and store a new person")
    crt.add_argument("--name", required=True, help="Given name")
    crt.add_argument("--surname", required=True, help="Surname")
    crt.add_argument("--patronymic", help="Optional patronymic")
    crt.set_defaults(func=cmd_create)

    upd = subparsers.add_parser("update", help="Replace a stored person with re-enriched data")
    upd.add_argument("--id", required=True, type=positive_int, help="Person id")
    upd.add_argument("--name", required=True, help="Given name")
    upd.add_argument("--surname", required=True, help="Surname")
    upd.add_argument("--patronymic", help="Optional patronymic")
    upd.set_defaults(func=cmd_update)

    dlt = subparsers.add_parser("delete", help="Delete a person by id")
    dlt.add_argument("--id", required=True, type=positive_int, help="Person id")
    dlt.set_defaults(func=cmd_delete)

    get = subparsers.add_parser("get", help="Show one person by id")
    get.add_argument("--id", required=True, type=positive_int, help="Person id")
    get.set_defaults(func=cmd_get)

    lst = subparsers.add_parser("list", help="List stored persons (filters are exact matches)")
    lst.add_argument("--id", type=non_negative_int, default=0, help="Filter by id")
    lst.add_argument("--name", default="", help="Filter by name")
    lst.add_argument("--surname", default="", help="Filter by surname")
    lst.add_argument("--age", type=non_negative_int, default=0, help="Filter by age")
    lst.add_argument("--gender", default="", help="Filter by gender")
    lst.add_argument("--nationality", default="", help="Filter by nationality (country code)")
    lst.add_argument("--limit", type=non_negative_int, help="Maximum number of persons to show")
    lst.add_argument("--offset", type=non_negative_int, default=0, help="Number of matching persons to skip")
    lst.set_defaults(func=cmd_list)

    enr = subparsers.add_parser("enrich", help="Look up age, gender and nationality for a name without storing")
    enr.add_argument("--name", required=True, help="Given name")
    enr.set_defaults(func=cmd_enrich)

    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        args.func(args)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
