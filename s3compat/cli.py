"""Command-line interface for s3compat.

Provides argument parsing and the main entry point for inspecting
providers and talking to configured connections from the command line.
"""

import argparse
import logging
import sys
from typing import Optional

from s3compat.client import S3Client
from s3compat.config import ConfigError, load_connections, parse_params, select_connection
from s3compat.cors import check_upload
from s3compat.duration import parse_duration
from s3compat.errors import InvalidConfiguration, InvalidParameters, S3CompatError
from s3compat.providers import PROFILES, create_provider, get_profile
from s3compat.reporters import ConsoleReporter, JsonReporter, Reporter


class CompositeReporter(Reporter):
    """Reporter that delegates to multiple reporters.

    Allows using both ConsoleReporter and JsonReporter simultaneously.
    """

    def __init__(self, reporters: list[Reporter]):
        self._reporters = reporters

    def on_providers(self, profiles) -> None:
        for reporter in self._reporters:
            reporter.on_providers(profiles)

    def on_regions(self, profile) -> None:
        for reporter in self._reporters:
            reporter.on_regions(profile)

    def on_endpoint(self, provider) -> None:
        for reporter in self._reporters:
            reporter.on_endpoint(provider)

    def on_presigned(self, bucket, key, presigned) -> None:
        for reporter in self._reporters:
            reporter.on_presigned(bucket, key, presigned)

    def on_location(self, url, location) -> None:
        for reporter in self._reporters:
            reporter.on_location(url, location)

    def on_buckets(self, listing) -> None:
        for reporter in self._reporters:
            reporter.on_buckets(listing)

    def on_objects(self, listing) -> None:
        for reporter in self._reporters:
            reporter.on_objects(listing)

    def on_cors(self, bucket, config, check) -> None:
        for reporter in self._reporters:
            reporter.on_cors(bucket, config, check)

    def on_error(self, error) -> None:
        for reporter in self._reporters:
            reporter.on_error(error)

    def on_complete(self) -> Optional[dict]:
        output = None
        for reporter in self._reporters:
            result = reporter.on_complete()
            if result is not None:
                output = result
        return output


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="s3compat",
        description="Inspect and use S3-compatible storage providers",
    )

    parser.add_argument(
        "-c", "--config",
        default="connections.json",
        help="Path to connections file (default: connections.json)",
    )

    parser.add_argument(
        "-n", "--connection",
        metavar="KEY",
        help="Connection to use when several are configured",
    )

    parser.add_argument(
        "-j", "--json-output",
        metavar="PATH",
        help="Write JSON results to file",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log requests and responses",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    providers = commands.add_parser("providers", help="List providers, or one provider's regions")
    providers.add_argument("provider", nargs="?", help="Provider id")

    endpoint = commands.add_parser("endpoint", help="Resolve a provider endpoint")
    endpoint.add_argument("provider", help="Provider id")
    endpoint.add_argument("-r", "--region", help="Region id")
    endpoint.add_argument(
        "-p", "--params",
        default="",
        metavar="LIST",
        help="Comma-separated name=value provider parameters",
    )

    presign = commands.add_parser("presign", help="Create a presigned URL")
    presign.add_argument("bucket")
    presign.add_argument("key")
    presign.add_argument(
        "-e", "--expires",
        default="60m",
        help="Lifetime, e.g. 15m, 2h, 7d (default: 60m)",
    )
    presign.add_argument(
        "-m", "--method",
        choices=["GET", "PUT"],
        default="GET",
        help="HTTP method the URL is valid for (default: GET)",
    )

    parse_url = commands.add_parser("parse-url", help="Map a URL back to bucket and key")
    parse_url.add_argument("url")

    buckets = commands.add_parser("buckets", help="List buckets")
    buckets.add_argument("--prefix", default="")

    ls = commands.add_parser("ls", help="List objects in a bucket")
    ls.add_argument("bucket")
    ls.add_argument("--prefix", default="")
    ls.add_argument("--max-keys", type=int, default=1000)
    ls.add_argument("--token", default="", help="Continuation token")

    cors = commands.add_parser("cors", help="Show CORS rules of a bucket")
    cors.add_argument("bucket")
    cors.add_argument("--origin", default="*", help="Origin to check uploads for")

    return parser.parse_args(argv)


def create_reporters(args: argparse.Namespace) -> list[Reporter]:
    """Create reporters based on command-line arguments.

    Args:
        args: Parsed command-line arguments

    Returns:
        List of configured reporters
    """
    reporters: list[Reporter] = [ConsoleReporter()]

    if args.json_output:
        reporters.append(JsonReporter(output_path=args.json_output))

    return reporters


def connect(args: argparse.Namespace) -> S3Client:
    """Build a client for the connection selected on the command line.

    Raises:
        ConfigError: If no usable connection is configured
    """
    connection = select_connection(load_connections(args.config), args.connection)
    return connection.build_client()


def run_command(args: argparse.Namespace, reporter: Reporter) -> None:
    """Execute the selected subcommand, reporting its result."""
    if args.command == "providers":
        if args.provider:
            reporter.on_regions(get_profile(args.provider))
        else:
            reporter.on_providers(list(PROFILES.values()))
        return

    if args.command == "endpoint":
        provider = create_provider(args.provider, args.region, **parse_params(args.params))
        reporter.on_endpoint(provider)
        return

    with connect(args) as client:
        if args.command == "presign":
            seconds = parse_duration(args.expires).seconds
            presigned = client.presigned_url(args.bucket, args.key, seconds, method=args.method)
            reporter.on_presigned(args.bucket, args.key, presigned)
        elif args.command == "parse-url":
            reporter.on_location(args.url, client.parse_url(args.url))
        elif args.command == "buckets":
            reporter.on_buckets(client.list_buckets(prefix=args.prefix))
        elif args.command == "ls":
            reporter.on_objects(client.list_objects(
                args.bucket,
                max_keys=args.max_keys,
                prefix=args.prefix,
                continuation_token=args.token,
            ))
        elif args.command == "cors":
            config = client.get_cors(args.bucket)
            reporter.on_cors(args.bucket, config, check_upload(config, args.origin))


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 1 for request failures, 2 for
        configuration or usage errors
    """
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    reporters = create_reporters(args)
    if len(reporters) == 1:
        reporter = reporters[0]
    else:
        reporter = CompositeReporter(reporters)

    try:
        run_command(args, reporter)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    except (InvalidConfiguration, InvalidParameters) as e:
        reporter.on_error(e)
        reporter.on_complete()
        return 2
    except S3CompatError as e:
        reporter.on_error(e)
        reporter.on_complete()
        return 1

    reporter.on_complete()
    return 0


if __name__ == "__main__":
    sys.exit(main())
