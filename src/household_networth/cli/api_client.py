"""CLI to exercise a running household_networth API.

Usage:
  poetry run api-client health
  poetry run api-client --token $TOKEN context
  poetry run api-client --household <id> dashboard
  poetry run api-client stocks price AAPL
  poetry run api-client --token $CRON_SECRET cron snapshot
"""
import argparse
import json
import sys

import httpx


def print_json(data: object) -> None:
    print(json.dumps(data, indent=2, default=str))


def _get(client: httpx.Client, path: str, **params: object) -> object:
    r = client.get(path, params={k: v for k, v in params.items() if v is not None})
    r.raise_for_status()
    return r.json()


def cmd_health(client: httpx.Client, _: argparse.Namespace) -> int:
    print_json(_get(client, "/"))
    return 0


def cmd_context(client: httpx.Client, _: argparse.Namespace) -> int:
    print_json(_get(client, "/context"))
    return 0


def cmd_dashboard(client: httpx.Client, _: argparse.Namespace) -> int:
    body = _get(client, "/dashboard")
    data = body["data"]
    print(f"Net worth: {data['netWorth']:,.2f}")
    print_json(data)
    return 0


def cmd_history(client: httpx.Client, args: argparse.Namespace) -> int:
    points = _get(client, "/dashboard/history")["data"]
    print(f"Found {len(points)} snapshots")
    print_json(points[-args.head:] if args.head else points)
    return 0


def cmd_stocks_price(client: httpx.Client, args: argparse.Namespace) -> int:
    print_json(_get(client, f"/stocks/price/{args.symbol}"))
    return 0


def cmd_stocks_search(client: httpx.Client, args: argparse.Namespace) -> int:
    matches = _get(client, "/stocks/search", q=args.query)["data"]
    print(f"Found {len(matches)} matches for {args.query!r}")
    print_json(matches)
    return 0


def cmd_cron_snapshot(client: httpx.Client, _: argparse.Namespace) -> int:
    print_json(_get(client, "/cron/create-snapshot"))
    return 0


def cmd_cron_refresh(client: httpx.Client, _: argparse.Namespace) -> int:
    print_json(_get(client, "/cron/refresh-prices"))
    return 0


HANDLERS = {
    "health": cmd_health,
    "context": cmd_context,
    "dashboard": cmd_dashboard,
    "history": cmd_history,
    "stocks": {"price": cmd_stocks_price, "search": cmd_stocks_search},
    "cron": {"snapshot": cmd_cron_snapshot, "refresh-prices": cmd_cron_refresh},
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Call household_networth API routes")
    parser.add_argument(
        "--base-url", default="http://127.0.0.1:8001", help="API base URL (default: %(default)s)"
    )
    parser.add_argument("--token", default=None, help="Bearer token (user token or cron secret)")
    parser.add_argument("--household", default=None, help="Active household id (X-Household-Id)")
    parser.add_argument("--timeout", type=float, default=30.0, help="Request timeout in seconds")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("health", help="GET /")
    subparsers.add_parser("context", help="GET /context")
    subparsers.add_parser("dashboard", help="GET /dashboard")
    p = subparsers.add_parser("history", help="GET /dashboard/history")
    p.add_argument("--head", type=int, default=0, help="Show only the latest N (0 = all)")

    stocks = subparsers.add_parser("stocks", help="Stock routes (/stocks)")
    stocks_sub = stocks.add_subparsers(dest="stocks_cmd", required=True)
    p = stocks_sub.add_parser("price", help="GET /stocks/price/{symbol}")
    p.add_argument("symbol", help="Ticker (e.g. AAPL)")
    p = stocks_sub.add_parser("search", help="GET /stocks/search?q=")
    p.add_argument("query", help="Ticker or company name")

    cron = subparsers.add_parser("cron", help="Scheduled jobs (/cron)")
    cron_sub = cron.add_subparsers(dest="cron_cmd", required=True)
    cron_sub.add_parser("snapshot", help="GET /cron/create-snapshot")
    cron_sub.add_parser("refresh-prices", help="GET /cron/refresh-prices")
    return parser


def main(argv: list[str] | None = None, transport: httpx.BaseTransport | None = None) -> int:
    args = build_parser().parse_args(argv)
    handler = HANDLERS[args.command]
    if isinstance(handler, dict):
        handler = handler[getattr(args, f"{args.command}_cmd")]

    headers = {}
    if args.token:
        headers["Authorization"] = f"Bearer {args.token}"
    if args.household:
        headers["X-Household-Id"] = args.household

    try:
        with httpx.Client(
            base_url=args.base_url.rstrip("/"),
            headers=headers,
            timeout=args.timeout,
            transport=transport,
        ) as client:
            return handler(client, args)
    except httpx.HTTPStatusError as e:
        print(f"HTTP error: {e.response.status_code}", file=sys.stderr)
        if e.response.content:
            try:
                print(e.response.json(), file=sys.stderr)
            except ValueError:
                print(e.response.text, file=sys.stderr)
        return 1
    except httpx.RequestError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
