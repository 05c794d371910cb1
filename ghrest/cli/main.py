"""Command-line interface for ghrest.

This module exposes the REST access layer on the command line. It parses
arguments, issues one request (or walks every page of a collection), and
prints the decoded result as JSON.

Features:
    - Any method, path fragment or absolute URL
    - Request bodies from the command line, a file, or a file upload
    - Pagination with a progress bar (--all, --single-page)
    - Extended results with status, rate limit and caching headers
    - Repository URL splitting/joining

Usage:
    ```bash
    # Single object
    ghrest request repos/octocat/Hello-World

    # Every page of a collection
    ghrest request repos/octocat/Hello-World/issues --all

    # Create a label
    ghrest request repos/me/repo/labels --method POST --body '{"name": "bug"}'

    # Owner/repository from a URL
    ghrest split https://github.com/octocat/Hello-World
    ```

Configuration:
    The CLI supports configuration via:
    - Command-line arguments (highest priority)
    - Environment variables
    - config.toml file (lowest priority)
"""
from __future__ import annotations
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional
import argparse
import json
import logging
import os
import sys

from ..core.config import Settings, load_settings
from ..core.errors import GitHubError, GitHubValidationError
from ..core.media import MEDIA_TYPES, MEDIA_TYPE_V3, media_accept_header
from ..core.pagination import fetch_all
from ..core.rest import RequestDescriptor, ResponseEnvelope, RestClient
from ..core.uri import join_uri, split_uri
from .progress import RichProgress


def _json_default(value: Any) -> Any:
    """Serialize values `json` does not know (datetimes, paths, bytes)."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(result: Any) -> str:
    """Render a payload, list of payloads or envelope as indented JSON."""
    if isinstance(result, ResponseEnvelope):
        result = result.model_dump()
    return json.dumps(result, ensure_ascii=False, indent=2, default=_json_default)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ghrest", description="Call the GitHub REST API.")
    p.add_argument("--config", help="Path to config.toml (defaults to ./config.toml if present)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("request", help="Issue a REST request and print the result as JSON")
    r.add_argument("path", help="API path fragment (repos/o/r/issues) or absolute URL")
    r.add_argument("--method", default="GET", type=str.upper,
                   choices=["GET", "POST", "PATCH", "PUT", "DELETE"], help="HTTP method")
    body = r.add_mutually_exclusive_group()
    body.add_argument("--body", help="Request body (usually JSON)")
    body.add_argument("--body-file", help="Read the request body from a file")
    body.add_argument("--in-file", help="Upload a file as the body of a POST")
    r.add_argument("--accept", default=MEDIA_TYPE_V3, help="Accept header (e.g. a preview media type)")
    r.add_argument("--media-type", choices=list(MEDIA_TYPES),
                   help="Request comment/body rendering: raw, text, html or full")
    r.add_argument("--all", dest="all_pages", action="store_true", help="Follow pagination and return every page")
    r.add_argument("--single-page", action="store_true", help="With --all, stop after the first page")
    r.add_argument("--extended", action="store_true", help="Include status, headers and pagination metadata")
    r.add_argument("--save-to", help="Save the response body to this file instead of decoding it")
    r.add_argument("--token", help="Access token (defaults to GITHUB_TOKEN)")
    r.add_argument("--out", help="Write to file instead of stdout")

    s = sub.add_parser("split", help="Print the owner and repository of a GitHub URL")
    s.add_argument("url", help="Web or API URL of a repository")

    j = sub.add_parser("join", help="Print the web URL of a repository")
    j.add_argument("owner", help="Repository owner")
    j.add_argument("repository", help="Repository name")
    return p


def run_request(args: argparse.Namespace, settings: Settings) -> Any:
    """Execute the `request` sub-command and return what should be printed."""
    accept = args.accept
    if args.media_type:
        accept = media_accept_header(args.media_type, accept=None if accept == MEDIA_TYPE_V3 else accept)

    body: Optional[str] = args.body
    if args.body_file:
        try:
            body = Path(args.body_file).read_text(encoding="utf-8")
        except OSError as exc:
            raise GitHubValidationError(f"Unable to read body file {args.body_file}: {exc.strerror or exc}") from exc

    d = RequestDescriptor(
        args.path,
        method=args.method,
        body=body,
        accept=accept,
        extended_result=args.extended,
        in_file=args.in_file,
        out_file=args.save_to,
        description=f"{args.method} {args.path}",
    )
    client = RestClient(settings, access_token=args.token)

    if args.all_pages:
        return fetch_all(d, single_page=args.single_page, client=client, progress=RichProgress())
    return client.execute(d)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI.

    Parses command-line arguments, loads configuration, runs the requested
    sub-command and writes the JSON result to stdout or `--out`.

    Returns:
        Process exit code: 0 on success, 1 when GitHub or the transport
        reported an error.
    """
    args = build_parser().parse_args(argv)

    # Load config.toml (if present) + env defaults
    settings = load_settings(args.config or "config.toml")
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    if args.command == "split":
        owner, repo = split_uri(args.url, settings.api_host_name)
        print(json.dumps({"owner_name": owner, "repository_name": repo}))
        return 0
    if args.command == "join":
        print(join_uri(args.owner, args.repository, settings.api_host_name))
        return 0

    try:
        result = run_request(args, settings)
    except GitHubError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    payload = to_json(result)
    if args.out:
        os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(payload)
        count = len(result) if isinstance(result, list) else 1
        print(f"wrote {args.out} ({count} items)")
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    sys.exit(main())
