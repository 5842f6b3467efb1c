"""
Command-line interface for the RDAP checker.

Usage:
    rdap-check example.com
    rdap-check example.com example.org --verbose
    cat domains.txt | rdap-check --concurrency 20 --stream

Exit codes:
    0: all domains available
    1: all registered, or a mix of available and registered
    2: usage error, invalid domain, or any unknown result
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO, Union
from urllib.parse import urlparse

import httpx

from . import __version__
from .aggregator import aggregate_status
from .concurrency import Failure, run_batch, run_streaming
from .config import CheckerConfig, CheckOptions, load_config_from_env, load_config_from_file
from .domain_validator import DomainValidator
from .enums import BatchStatus, DomainStatus
from .event_logger import EventLogger
from .exceptions import RdapCheckerError
from .models import CheckResult
from .orchestrator import FallbackOrchestrator


DEFAULT_MAX_CONCURRENCY = 10

EXIT_CODES = {
    BatchStatus.AVAILABLE: 0,
    BatchStatus.REGISTERED: 1,
    BatchStatus.MIXED: 1,
    BatchStatus.ERROR: 2,
}


def exit_code_for(status: BatchStatus) -> int:
    """Map an overall batch status to a process exit code."""
    return EXIT_CODES[status]


def read_stdin_domains(stream: Optional[TextIO] = None) -> list[str]:
    """
    Read domain names from a stream, one per line.

    Interactive terminals are not read. Blank lines are skipped.

    Args:
        stream: Input stream (defaults to sys.stdin)

    Returns:
        List of stripped, non-empty lines
    """
    stream = stream if stream is not None else sys.stdin
    if stream is None or stream.isatty():
        return []
    return [line.strip() for line in stream if line.strip()]


def normalize_domains(raw_domains: Iterable[str]) -> tuple[list[str], list[str]]:
    """
    Normalize domain input (trim, lower-case, IDNA-encode).

    Returns:
        Tuple of (canonical domains, raw inputs that failed validation)
    """
    validator = DomainValidator()
    domains: list[str] = []
    invalid: list[str] = []

    for raw in raw_domains:
        result = validator.validate(raw)
        if result.valid:
            domains.append(result.canonical_domain)
        else:
            invalid.append(raw)

    return domains, invalid


def _display_source(source: Optional[str]) -> str:
    if not source:
        return "-"
    if not source.startswith("http"):
        return source
    return urlparse(source).hostname or source


def format_table(results: Iterable[CheckResult]) -> list[str]:
    """
    Render results as an aligned DOMAIN / STATUS / TIME / SOURCE table.

    Returns:
        Header line, separator line, then one line per result
    """
    headers = ("DOMAIN", "STATUS", "TIME", "SOURCE")
    rows = [
        (
            result.domain,
            result.status.value.upper(),
            f"{result.response_time_ms}ms" if result.response_time_ms else "-",
            _display_source(result.source),
        )
        for result in results
    ]

    widths = [
        max([len(header)] + [len(row[i]) for row in rows])
        for i, header in enumerate(headers)
    ]

    def render(cells: tuple) -> str:
        return "  ".join(cell.ljust(width) for cell, width in zip(cells, widths))

    header_line = render(headers)
    return [header_line, "-" * len(header_line)] + [render(row) for row in rows]


def format_diagnostic(result: CheckResult) -> Optional[str]:
    """Describe why a result is unknown, if an HTTP response was received."""
    if result.status is not DomainStatus.UNKNOWN or result.http_status is None:
        return None
    text = f"HTTP {result.http_status}"
    if result.error_code is not None:
        text += f", Error {result.error_code}"
    return text


def _as_result(item: Union[CheckResult, Failure]) -> CheckResult:
    if isinstance(item, Failure):
        return CheckResult(domain=item.item, status=DomainStatus.UNKNOWN)
    return item


def write_results(results: list[CheckResult], output_file: Path) -> bool:
    """
    Write results to a JSON file.

    Returns:
        True if successful, False otherwise
    """
    try:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        with open(output_file, "w", encoding="utf-8") as f:
            json.dump([r.to_dict() for r in results], f, indent=2, ensure_ascii=False)
        return True
    except OSError as e:
        print(f"Error writing results: {e}", file=sys.stderr)
        return False


async def run_check(
    domains: list[str],
    config: CheckerConfig,
    client: Optional[httpx.AsyncClient] = None,
    verbose: bool = False,
    quiet: bool = False,
    stream: bool = False,
    output_file: Optional[Path] = None,
    logger: Optional[EventLogger] = None,
) -> int:
    """
    Check validated domains and print the results.

    Args:
        domains: Domain names, already validated
        config: Checker configuration
        client: Optional shared HTTP client
        verbose: Print a results table instead of bare statuses
        quiet: Suppress stdout output
        stream: Print results as they complete instead of in input order
        output_file: Optional path to write results as JSON
        logger: Optional event logger

    Returns:
        Exit code derived from the overall batch status
    """
    concurrency = config.concurrency or min(DEFAULT_MAX_CONCURRENCY, len(domains))

    async with FallbackOrchestrator(
        resolver_config=config.resolver,
        client=client,
        logger=logger,
    ) as orchestrator:

        async def worker(domain: str) -> CheckResult:
            return await orchestrator.check_domain(domain, config.options)

        if stream:
            completed: list[CheckResult] = []

            def on_result(result: CheckResult, domain: str) -> None:
                completed.append(result)
                if not quiet:
                    print(f"{domain}: {result.status.value}", flush=True)

            failures = await run_streaming(domains, concurrency, worker, on_result)
            outcomes: list = completed + failures
        else:
            outcomes = await run_batch(domains, concurrency, worker)

    for outcome in outcomes:
        if isinstance(outcome, Failure) and logger:
            logger.log_error(
                "CLI",
                f"Check failed for {outcome.item}",
                error=outcome.error,
            )

    results = [_as_result(outcome) for outcome in outcomes]

    if not quiet and not stream:
        if verbose:
            lines = format_table(results)
            print(lines[0])
            print(lines[1])
            domain_width = max([len("DOMAIN")] + [len(r.domain) for r in results])
            for line, result in zip(lines[2:], results):
                print(line)
                diagnostic = format_diagnostic(result)
                if diagnostic:
                    print(f"{'':<{domain_width}}  {diagnostic}", file=sys.stderr)
        elif len(results) == 1:
            print(results[0].status.value)
        else:
            for result in results:
                print(f"{result.domain}: {result.status.value}")

    if output_file:
        write_results(results, output_file)

    return exit_code_for(aggregate_status(outcomes))


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="rdap-check",
        description="Check domain registration status via RDAP",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "domains",
        nargs="*",
        help="Domains to check (also read from stdin when piped)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Show a detailed results table",
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress output; only set the exit code",
    )
    parser.add_argument(
        "--concurrency", "-c",
        type=int,
        help=f"Maximum parallel checks (default: min({DEFAULT_MAX_CONCURRENCY}, number of domains))",
    )
    parser.add_argument(
        "--timeout", "-t",
        type=int,
        help="Per-request timeout in milliseconds (default: 5000)",
    )
    parser.add_argument(
        "--no-fallback",
        action="store_true",
        help="Do not query the authoritative registry when the aggregator is inconclusive",
    )
    parser.add_argument(
        "--stream",
        action="store_true",
        help="Print results as they complete",
    )
    parser.add_argument(
        "--output", "-o",
        help="Path to write results as JSON",
    )
    parser.add_argument(
        "--config",
        help="Path to configuration file",
    )

    return parser


def build_config(args: argparse.Namespace) -> Optional[CheckerConfig]:
    """
    Layer defaults, environment, config file and command-line flags.

    Returns:
        CheckerConfig, or None if the config file could not be loaded
    """
    config = load_config_from_env()

    if args.config:
        config = load_config_from_file(Path(args.config), base=config)
        if config is None:
            print(f"Error: Could not load config from {args.config}", file=sys.stderr)
            return None

    options = CheckOptions(
        timeout_ms=args.timeout if args.timeout is not None else config.options.timeout_ms,
        fallback=config.options.fallback and not args.no_fallback,
    )
    config.options = options

    if args.concurrency is not None:
        config.concurrency = args.concurrency

    if args.verbose:
        config.logging.level = "debug"
    elif args.quiet:
        config.logging.level = "error"

    return config


def main(argv: Optional[list[str]] = None, stdin: Optional[TextIO] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])
        stdin: Input stream for piped domains (defaults to sys.stdin)

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    config = build_config(args)
    if config is None:
        return 2

    try:
        logger = EventLogger.from_config(
            config.logging.level,
            config.logging.output_format,
            retain_entries=False,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    domains = list(args.domains) + read_stdin_domains(stdin)

    if not domains:
        if not args.quiet:
            print("Error: No domains provided. Use --help for usage information.", file=sys.stderr)
        return 2

    domains, invalid = normalize_domains(domains)
    if invalid:
        if not args.quiet:
            print(f"Error: Invalid domain(s): {', '.join(invalid)}", file=sys.stderr)
        return 2

    output_file = Path(args.output) if args.output else None

    try:
        return asyncio.run(run_check(
            domains=domains,
            config=config,
            verbose=args.verbose,
            quiet=args.quiet,
            stream=args.stream,
            output_file=output_file,
            logger=logger,
        ))
    except (RdapCheckerError, OSError) as e:
        if not args.quiet:
            print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
