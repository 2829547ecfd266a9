"""
Command line entry point.

Usage:
    factotum --url="https://www.mannings.com.hk" --timeout=15 --verbose=false --jsonOnly=true
    python -m factotum -u https://www.mannings.com.hk -t 30 -j false
"""

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from .config import MIN_TIMEOUT, build_config, load_config, parse_bool
from .debug_log import error, info, set_verbose
from .errors import ConfigError, FactotumError

EXAMPLE = """
------------------------------------------------------------------------
Example:
      factotum --url="https://www.mannings.com.hk" --timeout=15 --verbose=false --jsonOnly=true

Example:
      python -m factotum -u https://www.mannings.com.hk -t 15 -j false
------------------------------------------------------------------------
"""


def _bool_arg(value: str) -> bool:
    try:
        return parse_bool(value)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="factotum",
        description="A web crawler that captures XHR JSON responses with a headless browser.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EXAMPLE,
    )
    parser.add_argument("--config",
                        help="config file (default is $HOME/.factotum.yaml)")
    parser.add_argument("--url", "-u",
                        help="URL of the website, e.g. https://www.mannings.com.hk")
    parser.add_argument("--timeout", "-t", type=int,
                        help=f"Seconds to listen for network events (default: 15, minimum: {MIN_TIMEOUT})")
    parser.add_argument("--verbose", "-v", type=_bool_arg, nargs="?", const=True,
                        help="Verbose output (default: false)")
    parser.add_argument("--jsonOnly", "-j", dest="json_only", type=_bool_arg, nargs="?", const=True,
                        help="Save JSON results only; false also saves requests and sample programs (default: true)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        raw = load_config(args.config)
        config = build_config(
            raw,
            url=args.url,
            timeout=args.timeout,
            verbose=args.verbose,
            jsonOnly=args.json_only,
        )
    except ConfigError as e:
        error("CONFIG", str(e))
        return 1

    if not config.url:
        parser.print_help()
        info("")
        error("CLI", "Please input valid url.")
        return 1

    if config.timeout < MIN_TIMEOUT:
        config = replace(config, timeout=MIN_TIMEOUT)

    set_verbose(config.verbose)

    # Imported here so --help works without the browser stack loaded
    from .session import run

    try:
        run(config)
    except FactotumError as e:
        error("SESSION", str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
