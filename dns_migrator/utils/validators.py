"""
Validators - Input validation for migration requests

The migration engine accepts any non-empty value; these helpers let the CLI
reject obviously malformed old/new values and zone names before a job is
submitted.
"""

import ipaddress
import logging
import re

logger = logging.getLogger(__name__)

_LABEL_RE = re.compile(r"^[a-zA-Z0-9_]([a-zA-Z0-9-]*[a-zA-Z0-9])?$")


def validate_fqdn(fqdn: str) -> bool:
    """
    Validate a domain name such as a zone or CNAME target.

    A single trailing dot (absolute name) is accepted.

    Args:
        fqdn: The name to validate

    Returns:
        True if valid, False otherwise
    """
    if not fqdn or not isinstance(fqdn, str):
        return False

    name = fqdn[:-1] if fqdn.endswith(".") else fqdn
    if len(name) > 253:
        logger.warning(f"FQDN too long: {fqdn}")
        return False

    labels = name.split(".")
    if len(labels) < 2:
        logger.warning(f"FQDN must have at least 2 labels: {fqdn}")
        return False

    for label in labels:
        if not label or len(label) > 63 or not _LABEL_RE.match(label):
            logger.warning(f"Invalid label '{label}' in FQDN: {fqdn}")
            return False

    # Rules out dotted quads such as 256.1.2.3
    if labels[-1].isdigit():
        logger.warning(f"Top-level label of {fqdn} is numeric")
        return False

    return True


def validate_ipv4(ipv4: str) -> bool:
    """
    Validate IPv4 address.

    Args:
        ipv4: The IPv4 address to validate

    Returns:
        True if valid, False otherwise
    """
    if not ipv4 or not isinstance(ipv4, str):
        return False

    try:
        ipaddress.IPv4Address(ipv4.strip())
        return True
    except ipaddress.AddressValueError:
        return False


def validate_ipv6(ipv6: str) -> bool:
    if not ipv6 or not isinstance(ipv6, str):
        return False

    try:
        ipaddress.IPv6Address(ipv6.strip())
        return True
    except ipaddress.AddressValueError:
        return False


def validate_record_value(value: str) -> bool:
    """
    Check that a value can be the content of an A, AAAA or CNAME record.

    Args:
        value: IPv4 address, IPv6 address or host name

    Returns:
        True if valid, False otherwise
    """
    if validate_ipv4(value) or validate_ipv6(value) or validate_fqdn(value):
        return True

    logger.warning(f"Invalid record value: {value}")
    return False


def validate_zone_name(zone: str) -> bool:
    """
    Validate DNS zone name.

    Args:
        zone: The zone name to validate

    Returns:
        True if valid, False otherwise
    """
    if not zone or not isinstance(zone, str):
        return False

    # Zone names are domain names, never addresses
    if validate_ipv4(zone) or validate_ipv6(zone):
        return False

    return validate_fqdn(zone)
