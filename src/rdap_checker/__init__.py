"""
RDAP Checker - domain registration status via RDAP.

This package resolves whether domain names are available or registered by
querying an RDAP aggregator, falling back to the authoritative registry
server found through the IANA bootstrap directory, and runs such checks
over batches with bounded concurrency.
"""

__version__ = "0.1.0"

from rdap_checker.exceptions import (
    RdapCheckerError,
    ValidationError,
    NetworkError,
    BootstrapError,
)
from rdap_checker.enums import (
    DomainStatus,
    BatchStatus,
    ResolutionState,
    LogLevel,
    DomainValidationErrorCode,
)
from rdap_checker.config import (
    CheckOptions,
    ResolverConfig,
    LoggingConfig,
    CheckerConfig,
    load_config_from_env,
    load_config_from_file,
)
from rdap_checker.models import (
    CheckResult,
    RdapFetch,
    Interpretation,
    BootstrapCacheEntry,
)
from rdap_checker.domain_validator import (
    DomainValidator,
    DomainValidationResult,
    DomainValidationError,
    is_valid_domain,
)
from rdap_checker.response_interpreter import (
    interpret,
    parse_error_code,
)
from rdap_checker.event_logger import (
    EventLogger,
    LogEntry,
)
from rdap_checker.rdap_client import (
    RdapResolver,
    build_query_url,
)
from rdap_checker.bootstrap import (
    BootstrapDirectory,
    extract_tld,
    parse_bootstrap_services,
    get_default_directory,
    invalidate_bootstrap_cache,
)
from rdap_checker.orchestrator import (
    FallbackOrchestrator,
    check_domain,
)
from rdap_checker.concurrency import (
    Success,
    Failure,
    run_batch,
    run_streaming,
    stream_outcomes,
)
from rdap_checker.aggregator import (
    BatchSummary,
    aggregate_status,
    summarize,
)
from rdap_checker.cli import (
    main as cli_main,
    create_parser,
    run_check,
)

__all__ = [
    # Exceptions
    "RdapCheckerError",
    "ValidationError",
    "NetworkError",
    "BootstrapError",
    # Enums
    "DomainStatus",
    "BatchStatus",
    "ResolutionState",
    "LogLevel",
    "DomainValidationErrorCode",
    # Configuration
    "CheckOptions",
    "ResolverConfig",
    "LoggingConfig",
    "CheckerConfig",
    "load_config_from_env",
    "load_config_from_file",
    # Models
    "CheckResult",
    "RdapFetch",
    "Interpretation",
    "BootstrapCacheEntry",
    # Domain Validator
    "DomainValidator",
    "DomainValidationResult",
    "DomainValidationError",
    "is_valid_domain",
    # Response Interpreter
    "interpret",
    "parse_error_code",
    # Event Logger
    "EventLogger",
    "LogEntry",
    # RDAP Client
    "RdapResolver",
    "build_query_url",
    # Bootstrap Directory
    "BootstrapDirectory",
    "extract_tld",
    "parse_bootstrap_services",
    "get_default_directory",
    "invalidate_bootstrap_cache",
    # Orchestrator
    "FallbackOrchestrator",
    "check_domain",
    # Concurrency
    "Success",
    "Failure",
    "run_batch",
    "run_streaming",
    "stream_outcomes",
    # Aggregator
    "BatchSummary",
    "aggregate_status",
    "summarize",
    # CLI
    "cli_main",
    "create_parser",
    "run_check",
]
