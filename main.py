"""CLI entrypoint: run the HTTP service or a one-off auto export."""

from __future__ import annotations

import argparse
import json
import logging

from dotenv import load_dotenv

from config import Settings, load_settings
from csv_sink import SerializationError
from mika_client import DEFAULT_ORDER_BY, UpstreamError
from pagination import DEFAULT_DELAY_MS


def parse_args(settings: Settings) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Relay and export MIKA thesis-submission records")
    parser.add_argument(
        "--mode",
        choices=["serve", "export"],
        default="serve",
        help=(
            "'serve' (default): run the HTTP API. "
            "'export': collect rows across pages once and write a CSV to the export directory."
        ),
    )
    parser.add_argument("--host", default=settings.host, help="Bind address for serve mode")
    parser.add_argument("--port", type=int, default=settings.port, help="Listen port for serve mode")
    parser.add_argument("--target", type=int, default=100, help="Rows to collect in export mode")
    parser.add_argument("--per-page", type=int, default=25, help="Rows per upstream request in export mode")
    parser.add_argument("--start-offset", type=int, default=0, help="First offset in export mode")
    parser.add_argument(
        "--delay",
        type=float,
        default=DEFAULT_DELAY_MS,
        help="Pause between upstream requests, in milliseconds",
    )
    parser.add_argument(
        "--order-by",
        action="append",
        default=None,
        help="Sort expression such as 'mahasiswa.nim|desc'; repeat for several",
    )
    return parser.parse_args()


def run_export(settings: Settings, args: argparse.Namespace) -> int:
    """Run one auto export and print the summary JSON. Returns the exit code."""
    from exports import save_auto_csv  # noqa: PLC0415

    try:
        summary = save_auto_csv(
            settings,
            target=max(1, args.target),
            per_page=max(1, args.per_page),
            start_offset=max(0, args.start_offset),
            order_by=args.order_by or list(DEFAULT_ORDER_BY),
            delay_ms=max(0.0, args.delay),
        )
    except UpstreamError as exc:
        logging.error("Export failed: status=%s message=%s", exc.status_code, exc.message)
        return 1
    except SerializationError as exc:
        logging.error("Export failed: %s", exc)
        return 1

    print(json.dumps(summary, indent=2))
    return 0


def serve(settings: Settings, host: str, port: int) -> None:
    import uvicorn  # noqa: PLC0415

    from app import create_app  # noqa: PLC0415

    logging.info("Server is running on %s:%s (upstream=%s)", host, port, settings.api_url)
    uvicorn.run(create_app(settings), host=host, port=port)


def main() -> None:
    """Load config and dispatch on --mode."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    settings = load_settings()
    args = parse_args(settings)

    if args.mode == "export":
        raise SystemExit(run_export(settings, args))
    serve(settings, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
