"""Extractly CLI.

Usage:
    extractly serve [--host=<host>] [--port=<port>] [--debug]
    extractly init-db [--debug]
    extractly extract <url> <instruction> [--file=<path>] [--storage=<path>] [--debug]
    extractly records [--page=<n>] [--limit=<n>] [--search=<text>] [--status=<status>] [--storage=<path>]
    extractly record <record_id> [--storage=<path>]
    extractly history [--storage=<path>]
    extractly -h | --help

Commands:
    serve       Run the backend API and records browser
    init-db     Create the database tables
    extract     Capture a page (fetched, or read from --file) and send it to the backend
    records     List extraction records stored by the backend
    record      Show one extraction record
    history     Show the local extraction history (last 50 results)

Options:
    --host=<host>       Bind address [default: 0.0.0.0]
    --port=<port>       Port (defaults to $PORT or 3000)
    --file=<path>       Read the page HTML from a file instead of fetching the URL
    --storage=<path>    Local storage file for settings and history
    --page=<n>          Page number [default: 1]
    --limit=<n>         Records per page [default: 10]
    --search=<text>     Search url, instruction and error message
    --status=<status>   Filter by status (pending, processing, completed, failed)
    --debug             Enable debug logging
    -h --help           Show this help message

Examples:
    extractly serve --port 3000
    extractly extract https://example.com "get the product name and price"
    extractly extract https://example.com "get the title" --file page.html
    extractly records --status completed --limit 5
"""

from __future__ import annotations

import json
import sys
from typing import Any

import httpx
from docopt import docopt

from extractly.capture.client import CaptureError, ExtractlyClient
from extractly.capture.page import Page, PageHandler
from extractly.capture.router import MessageRouter
from extractly.capture.storage import (
    DEFAULT_STORAGE_PATH,
    LocalStorage,
    get_history,
    get_settings,
    install_defaults,
)
from extractly.config import Settings
from extractly.logger import get_logger, setup_logging

logger = get_logger(__name__)


def _print_json(data: Any) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))


def _storage(args) -> LocalStorage:
    storage = LocalStorage(args["--storage"] or DEFAULT_STORAGE_PATH)
    install_defaults(storage)
    return storage


def serve(args, settings: Settings) -> None:
    import uvicorn

    from extractly.main import create_app

    port = int(args["--port"]) if args["--port"] else settings.port
    logger.info("Extractly backend starting on port %d", port)
    logger.info("Health check: http://localhost:%d/health", port)
    uvicorn.run(create_app(settings), host=args["--host"] or settings.host, port=port, log_config=None)


def extract(args) -> int:
    storage = _storage(args)
    url = args["<url>"]
    page = Page.from_file(args["--file"], url) if args["--file"] else Page.fetch(url)

    router = MessageRouter(storage)
    router.open_page(1, PageHandler(page))

    captured = router.dispatch({"type": "GET_PAGE_HTML"})
    if not captured.success:
        logger.error("Could not capture page: %s", captured.error)
        return 1

    response = router.dispatch(
        {
            "type": "EXTRACT_DATA",
            "data": {
                "url": captured.data["url"],
                "html": captured.data["html"],
                "instruction": args["<instruction>"],
            },
        }
    )
    _print_json(response.to_dict())
    return 0 if response.success else 1


def main(argv=None) -> int:
    args = docopt(__doc__, argv=argv)
    settings = Settings.from_env()
    setup_logging(
        log_level="DEBUG" if args["--debug"] else settings.log_level,
        log_path=settings.log_path,
    )

    try:
        if args["serve"]:
            serve(args, settings)
            return 0

        if args["init-db"]:
            from extractly.db.sql import Database

            database = Database(settings.database_url, echo=settings.sql_echo)
            database.create_all()
            logger.info("Tables created on %s", settings.database_url)
            database.dispose()
            return 0

        if args["extract"]:
            return extract(args)

        storage = _storage(args)
        if args["history"]:
            _print_json(get_history(storage))
            return 0

        client = ExtractlyClient(get_settings(storage))
        try:
            if args["records"]:
                _print_json(
                    client.list_records(
                        page=args["--page"],
                        limit=args["--limit"],
                        search=args["--search"],
                        status=args["--status"],
                    )
                )
            elif args["record"]:
                _print_json(client.get_record(args["<record_id>"]))
        finally:
            client.close()
        return 0
    except CaptureError as e:
        logger.error("%s", e)
        return 1
    except httpx.HTTPError as e:
        logger.error("Could not fetch page: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
