"""CLI entry point for t9s."""

from __future__ import annotations

import argparse
import logging

import t9s.io.logging_setup
import t9s.palette
import t9s.settings
from t9s.backend.errors import BackendConfigError
from t9s.backend.http import HttpTemporalBackend
from t9s.core.location import DeepLinkError, ExecutionsCollection, Location, format_deep_link, parse_deep_link
from t9s.core.state import initial_state
from t9s.tui.app import T9sApp

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="t9s",
        description="Terminal dashboard for Temporal workflows and schedules",
    )
    parser.add_argument(
        "--address",
        type=str,
        default=None,
        help="Temporal HTTP API address (default: http://localhost:8233). Env: TEMPORAL_ADDRESS",
    )
    parser.add_argument(
        "--namespace",
        type=str,
        default=None,
        help="Namespace to open (default: default). Env: TEMPORAL_NAMESPACE",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Bearer token for the API. Env: TEMPORAL_API_KEY",
    )
    parser.add_argument(
        "--tls-cert",
        type=str,
        default=None,
        metavar="PATH",
        help="Client certificate for mTLS (implies https). Env: TEMPORAL_TLS_CERT",
    )
    parser.add_argument(
        "--tls-key",
        type=str,
        default=None,
        metavar="PATH",
        help="Private key for --tls-cert. Env: TEMPORAL_TLS_KEY",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Seconds between refreshes (default: 3). Env: T9S_POLL_INTERVAL",
    )
    parser.add_argument("--page-size", type=int, default=None, help="Workflows per page (default: 50)")
    parser.add_argument(
        "--open",
        dest="open_uri",
        type=str,
        default=None,
        metavar="URI",
        help="Start at a temporal:// deep link",
    )
    parser.add_argument(
        "--print-link",
        action="store_true",
        default=False,
        help="Print the deep link of the starting location and exit.",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        metavar="PATH",
        help="Write the session log here. Env: T9S_LOG_FILE",
    )
    parser.add_argument(
        "--seed-hue",
        type=float,
        default=None,
        help="Seed hue (0-360) for color palette (default: 190, cyan). Env: T9S_SEED_HUE",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    t9s.io.logging_setup.configure(log_file=args.log_file)
    try:
        _run(parser, args)
    finally:
        t9s.io.logging_setup.shutdown()


def _run(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    settings = t9s.settings.resolve_settings(
        {
            "address": args.address,
            "namespace": args.namespace,
            "api_key": args.api_key,
            "tls_cert": args.tls_cert,
            "tls_key": args.tls_key,
            "poll_interval": args.poll_interval,
            "page_size": args.page_size,
        }
    )

    if args.open_uri:
        try:
            location = parse_deep_link(args.open_uri)
        except DeepLinkError as e:
            parser.error(f"invalid --open link {args.open_uri!r}: {e}")
    else:
        location = Location(settings.namespace, (ExecutionsCollection(),))

    if args.print_link:
        print(format_deep_link(location))
        return

    try:
        backend = HttpTemporalBackend(
            settings.address,
            settings.api_key,
            settings.request_timeout,
            tls_cert=settings.tls_cert,
            tls_key=settings.tls_key,
        )
    except BackendConfigError as e:
        parser.error(str(e))

    t9s.palette.init_palette(args.seed_hue)

    state = initial_state(
        location.namespace,
        poll_interval=settings.poll_interval,
        page_size=settings.page_size,
        page_height=settings.page_height,
    )
    logger.info(
        "connecting to %s namespace=%s mtls=%s",
        backend.address,
        location.namespace,
        "on" if settings.tls_cert else "off",
    )
    app = T9sApp(
        backend,
        state=state,
        initial_location=location,
        tick_interval=settings.tick_interval,
    )
    app.run()


if __name__ == "__main__":
    main()
