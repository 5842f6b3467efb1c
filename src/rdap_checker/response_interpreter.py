"""
RDAP response interpretation.

Maps an HTTP status plus an optionally parsed JSON body to the tri-state
registration status. Some registries answer HTTP 200 with a minimal or
null RDAP object for names that do not exist; only an embedded
``errorCode`` of 404 distinguishes "not found" from "found but sparse".
"""

from typing import Any, Optional

from .enums import DomainStatus
from .models import Interpretation


NOT_FOUND = 404


def parse_error_code(body: Any) -> Optional[int]:
    """
    Extract the numeric ``errorCode`` member of an RDAP body.

    Unknown members are ignored; a non-object body or a non-numeric
    ``errorCode`` yields None.
    """
    if not isinstance(body, dict):
        return None
    error_code = body.get("errorCode")
    # bool is an int subclass but not a JSON number
    if isinstance(error_code, bool) or not isinstance(error_code, (int, float)):
        return None
    if isinstance(error_code, float):
        if not error_code.is_integer():
            return None
        return int(error_code)
    return error_code


def interpret(http_status: int, body: Any) -> Interpretation:
    """
    Classify an RDAP response.

    Args:
        http_status: HTTP status code of the (post-redirect) response
        body: Parsed JSON body, or None when absent or unparseable

    Returns:
        Interpretation with the status and any embedded error code
    """
    error_code = parse_error_code(body)

    if http_status == 200:
        if error_code == NOT_FOUND:
            return Interpretation(DomainStatus.AVAILABLE, error_code)
        return Interpretation(DomainStatus.REGISTERED)

    if http_status == NOT_FOUND:
        return Interpretation(DomainStatus.AVAILABLE, NOT_FOUND)

    if error_code == NOT_FOUND:
        return Interpretation(DomainStatus.AVAILABLE, error_code)

    return Interpretation(DomainStatus.UNKNOWN, error_code)
