"""
Domain validation and normalization module.

Provides the strict syntactic check used before any network activity, and
a normalizing validator that turns user input into a canonical
(lowercase, IDNA-encoded) domain name.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

import idna

from rdap_checker.enums import DomainValidationErrorCode
from rdap_checker.exceptions import ValidationError


MAX_DOMAIN_LENGTH = 253

# 1-63 alphanumerics/hyphens, no leading or trailing hyphen
LABEL_PATTERN = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?")

# Forbidden characters in domain names (control chars, spaces, special symbols)
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'           # Control characters
    r'\s'                        # Whitespace
    r'!@#$%^&*()+=\[\]{}|\\:;"\'<>,?/`~]'  # Special symbols not allowed
)


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]


class DomainValidator:
    """
    Validates and normalizes domain names.

    ``is_valid`` is a pure predicate over the exact input string.
    ``validate`` additionally strips, lowercases and IDNA-encodes the
    input before applying the same structural rules.
    """

    def is_valid(self, name: Any) -> bool:
        """
        Check that a string is an admissible domain name.

        Args:
            name: Candidate domain name

        Returns:
            True if the name has at least two well-formed labels and
            fits within 253 characters
        """
        if not isinstance(name, str) or not name:
            return False
        return self._check_structure(name) is None

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with validation status and canonical form or error
        """
        if not raw_domain or not raw_domain.strip():
            return self._invalid(
                DomainValidationErrorCode.EMPTY_INPUT,
                "Domain input is empty",
                {"raw_input": raw_domain},
            )

        domain = raw_domain.strip()

        if FORBIDDEN_CHARS_PATTERN.search(domain):
            return self._invalid(
                DomainValidationErrorCode.FORBIDDEN_CHARS,
                "Domain contains forbidden characters",
                {
                    "raw_input": raw_domain,
                    "forbidden_chars": FORBIDDEN_CHARS_PATTERN.findall(domain),
                },
            )

        try:
            canonical = self.normalize_to_canonical(domain)
        except ValidationError as e:
            return self._invalid(
                DomainValidationErrorCode.IDNA_ERROR,
                e.message,
                e.details,
            )

        error = self._check_structure(canonical)
        if error is not None:
            error.details["raw_input"] = raw_domain
            return DomainValidationResult(valid=False, canonical_domain=None, error=error)

        return DomainValidationResult(
            valid=True,
            canonical_domain=canonical,
            error=None,
        )

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert domain to canonical form (lowercase, IDNA-encoded).

        Args:
            domain: Domain string to normalize

        Returns:
            Canonical form of the domain

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()

        if any(ord(c) > 127 for c in domain_lower):
            try:
                return idna.encode(domain_lower, uts46=True).decode("ascii")
            except idna.IDNAError as e:
                raise ValidationError(
                    code=DomainValidationErrorCode.IDNA_ERROR.value,
                    message=f"IDNA encoding failed: {e}",
                    details={"domain": domain, "idna_error": str(e)},
                )

        return domain_lower

    def _check_structure(self, domain: str) -> Optional[DomainValidationError]:
        if len(domain) > MAX_DOMAIN_LENGTH:
            return DomainValidationError(
                code=DomainValidationErrorCode.TOO_LONG,
                message=f"Domain exceeds {MAX_DOMAIN_LENGTH} characters",
                details={"length": len(domain)},
            )

        labels = domain.split(".")
        if len(labels) < 2:
            return DomainValidationError(
                code=DomainValidationErrorCode.MISSING_TLD,
                message="Domain has no top-level label",
                details={"domain": domain},
            )

        for label in labels:
            if not LABEL_PATTERN.fullmatch(label):
                return DomainValidationError(
                    code=DomainValidationErrorCode.INVALID_LABEL,
                    message=f"Invalid label: {label!r}",
                    details={"domain": domain, "label": label},
                )

        return None

    @staticmethod
    def _invalid(
        code: DomainValidationErrorCode, message: str, details: dict
    ) -> DomainValidationResult:
        return DomainValidationResult(
            valid=False,
            canonical_domain=None,
            error=DomainValidationError(code=code, message=message, details=details),
        )


_validator = DomainValidator()


def is_valid_domain(name: Any) -> bool:
    """Module-level shortcut for ``DomainValidator().is_valid``."""
    return _validator.is_valid(name)
