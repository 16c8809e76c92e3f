"""Post every Rollbar fixture in a directory to a running relay.

Usage:
    matterbar-audit -a <auth-token> [-H localhost:8080] [-s http] [-d tests/fixtures]

Prints one line per file with the response status and body, which makes it a
quick way to eyeball how each event type renders in a real channel.
"""

import argparse
import sys
from pathlib import Path

import httpx

NOTIFY_PATH = "/notify"


def build_url(scheme: str, host: str, auth: str, team: str = "", channel: str = "") -> str:
    params = {"auth": auth}
    if team:
        params["team"] = team
    if channel:
        params["channel"] = channel
    return str(httpx.URL(f"{scheme}://{host}{NOTIFY_PATH}", params=params))


def validate_args(args: argparse.Namespace) -> str:
    """Return an error message for invalid arguments, or "" when they are fine."""
    if not args.auth:
        return "Missing auth token. Usage: `-a <auth-token>`"
    if args.scheme not in ("http", "https"):
        return f'Invalid scheme "{args.scheme}". Expected one of {{"http", "https"}}'
    return ""


def post_fixtures(files: list[Path], url: str, client: httpx.Client) -> int:
    """Send each file as a webhook body. Returns the number of failed requests."""
    failures = 0
    for path in files:
        print(f"Sending {path.name}...", end="")
        try:
            response = client.post(
                url,
                content=path.read_bytes(),
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as exc:
            print(f"  http post error: {exc}")
            failures += 1
            continue

        body = response.text or "No response body"
        print(f"  {response.status_code} {response.reason_phrase}: {body}")
        if response.is_error:
            failures += 1
    return failures


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="matterbar-audit",
        description="Post Rollbar fixture payloads to a running matterbar relay.",
    )
    parser.add_argument("-a", "--auth", default="", help="webhook auth token")
    parser.add_argument("-H", "--host", default="localhost:8080", help="relay host[:port]")
    parser.add_argument("-s", "--scheme", default="http", help="url scheme (http or https)")
    parser.add_argument("-t", "--team", default="", help="team name to post to")
    parser.add_argument("-c", "--channel", default="", help="channel name to post to")
    parser.add_argument(
        "-d",
        "--directory",
        type=Path,
        default=Path("tests/fixtures"),
        help="directory holding *.json payloads",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    error = validate_args(args)
    if error:
        print(error, file=sys.stderr)
        return 2

    files = sorted(args.directory.glob("*.json"))
    if not files:
        print(f"No .json files found in {args.directory}", file=sys.stderr)
        return 1

    url = build_url(args.scheme, args.host, args.auth, args.team, args.channel)
    with httpx.Client(timeout=httpx.Timeout(10.0)) as client:
        failures = post_fixtures(files, url, client)
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
