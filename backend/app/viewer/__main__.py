"""Command-line call history viewer.

Usage:
    python -m app.viewer --start 2024-01-01 --end 2024-01-07 [--user ID ...]
"""

import argparse
import asyncio
import logging
import sys
from datetime import date, timedelta

from app.viewer.client import CallHistoryViewer, GatewayClient, GatewayError, QueryValidationError
from app.viewer.render import render_text

logger = logging.getLogger(__name__)


def _parse_args(argv):
    today = date.today()
    parser = argparse.ArgumentParser(description="Show Webex call history through the gateway.")
    parser.add_argument("--gateway", default="http://localhost:3000", help="Gateway base URL")
    parser.add_argument("--start", default=(today - timedelta(days=7)).isoformat(), help="Start date, YYYY-MM-DD")
    parser.add_argument("--end", default=today.isoformat(), help="End date, YYYY-MM-DD")
    parser.add_argument("--user", action="append", dest="users", help="User ID (repeatable; default: all users)")
    parser.add_argument("--limit", default=None, help="Records per user (max 200)")
    parser.add_argument("--filter", default="all", choices=["all", "inbound", "outbound", "missed"])
    parser.add_argument("--partial", action="store_true", help="Show successful users even if some fail")
    return parser.parse_args(argv)


async def _run(args) -> int:
    gateway = GatewayClient(args.gateway)
    viewer = CallHistoryViewer(gateway, allow_partial=args.partial)
    try:
        try:
            user = await viewer.check_health()
            print(f"API Connected: Authenticated as {user}")
        except GatewayError as e:
            print(f"Warning: API connection check failed ({e.message}). Some features may not work properly.")

        await viewer.load_users()
        if viewer.state.users_error:
            print(f"Error: {viewer.state.users_error}")
            return 1

        if args.users:
            viewer.state.selected_user_ids = args.users
        else:
            viewer.state.select_all_users()

        try:
            await viewer.submit_query(args.start, args.end, args.limit)
        except (QueryValidationError, GatewayError):
            print(render_text(viewer.state))
            return 1

        viewer.apply_direction_filter(args.filter)
        print(render_text(viewer.state))
        return 0
    finally:
        await gateway.close()


def main(argv=None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    return asyncio.run(_run(_parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
