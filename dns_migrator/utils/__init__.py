"""
Utility functions and helpers.

This package contains validation helpers used by the command line interface.
"""

from .validators import (
    validate_fqdn,
    validate_ipv4,
    validate_ipv6,
    validate_record_value,
    validate_zone_name,
)

__all__ = [
    "validate_fqdn",
    "validate_ipv4",
    "validate_ipv6",
    "validate_record_value",
    "validate_zone_name",
]
