#!/usr/bin/env python3
# Copyright 2024 BeardedGiant
# https://github.com/bearded-giant/gitlab-tools
# Licensed under Apache License 2.0

"""Command line entry point for the GitLab pipeline browser"""

import sys
import logging
import argparse
from pathlib import Path

from .config import Config
from .errors import ConfigError

log = logging.getLogger(__name__)


def output_error(message: str):
    print(f"❌ Error: {message}", file=sys.stderr)
    sys.exit(1)


def setup_logging(log_file: Path, verbose: bool = False):
    """Send log records to a file so they never draw over the terminal UI"""
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=str(log_file),
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # python-gitlab and urllib3 are very chatty at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def create_parser():
    parser = argparse.ArgumentParser(
        prog="gl-browse",
        description="Browse GitLab groups, pipelines and jobs from the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  GITLAB_PERSONAL_TOKEN   Access token (required)
  GITLAB_URL              Instance URL (default: https://gitlab.com)

Examples:
  %(prog)s
  %(prog)s --filter platform
  %(prog)s config --gitlab-url https://gitlab.example.com
  %(prog)s config --show
        """,
    )
    parser.add_argument(
        "--filter",
        metavar="TEXT",
        help="Start on the group list filtered by TEXT instead of asking",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log requests and timings at debug level",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    config_parser = subparsers.add_parser("config", help="Show or save configuration")
    config_parser.add_argument("--gitlab-url", help="GitLab server URL")
    config_parser.add_argument("--per-page", type=int, help="Page size for listings (1-100)")
    config_parser.add_argument("--request-timeout", type=float, help="HTTP timeout in seconds")
    config_parser.add_argument("--show", action="store_true", help="Show current configuration")
    return parser


def cmd_config(config: Config, args):
    if args.show:
        config.validate_settings()
        print(f"GitLab URL: {config.gitlab_url}")
        print(f"Token: {'Set' if config.gitlab_token else 'Not set'}")
        print(f"Page size: {config.per_page}")
        print(f"Request timeout: {config.request_timeout}s")
        print(f"Refresh on back: {config.refresh_on_back}")
        print(f"Log file: {config.log_file}")
        return

    update = {}
    if args.gitlab_url:
        update['gitlab_url'] = args.gitlab_url
    if args.per_page is not None:
        update['per_page'] = args.per_page
    if args.request_timeout is not None:
        update['request_timeout'] = args.request_timeout

    if update:
        config.save_config(**update)
        print("Configuration saved")


def run_browser(config: Config, args):
    # Imported here so `config` works without a terminal UI stack
    from .client import ResourceClient
    from .navigator import Navigator
    from .tui import BrowserApp

    setup_logging(config.log_file, args.verbose)
    print("Connecting to Instance:", config.gitlab_url)
    log.info("Connecting to %s", config.gitlab_url)

    navigator = Navigator(ResourceClient(config), config)
    BrowserApp(navigator, initial_filter=args.filter).run()


def main(argv=None):
    """Main entry point for the browser"""
    args = create_parser().parse_args(argv)

    try:
        config = Config()
        if args.command == "config":
            cmd_config(config, args)
            return
        config.validate()
    except ConfigError as e:
        output_error(str(e))

    run_browser(config, args)


if __name__ == "__main__":
    main()
