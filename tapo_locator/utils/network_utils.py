"""
Address helpers shared by the discovery phases.

MAC matching is always done on the normalized form (lowercase hex, no
separators) because the cloud API, the device replies and the OS neighbor
tools each use a different separator convention.
"""

import re
import ipaddress
from typing import Optional

LIMITED_BROADCAST = "255.255.255.255"

_IPV4_PATTERN = re.compile(r"\b\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}\b")


def normalize_mac(text: Optional[str]) -> str:
    """
    Canonicalize MAC address text for comparison.

    Removes every ``:`` and ``-`` and lowercases the rest. Works on arbitrary
    text as well, so a whole reply payload or table line can be normalized
    before a containment check.

    Args:
        text: MAC address (any separator style) or any text containing one

    Returns:
        str: Normalized text, "" for None
    """
    if not text:
        return ""
    return text.replace(":", "").replace("-", "").lower()


def mac_in_text(target_mac: str, text: str) -> bool:
    """
    Check whether a MAC address appears anywhere inside a piece of text.

    Both sides are normalized. An empty target never matches.
    """
    target = normalize_mac(target_mac)
    if not target:
        return False
    return target in normalize_mac(text)


def is_valid_ip(ip_address: str) -> bool:
    """
    Check if a string represents a valid IPv4 address.

    Args:
        ip_address: String to validate as IPv4 address

    Returns:
        bool: True if valid IPv4 address, False otherwise
    """
    try:
        ipaddress.IPv4Address(ip_address)
        return True
    except ipaddress.AddressValueError:
        return False


def directed_broadcast(ip_address: str, netmask: str) -> str:
    """
    Compute the directed broadcast address ``ip | ~mask``.

    Args:
        ip_address: Unicast IPv4 address of the interface
        netmask: Dotted decimal subnet mask

    Returns:
        str: Broadcast address, e.g. 192.168.1.255 for 192.168.1.37/255.255.255.0

    Raises:
        ValueError: If the address or mask is not valid IPv4
    """
    try:
        ip_int = int(ipaddress.IPv4Address(ip_address))
        mask_int = int(ipaddress.IPv4Address(netmask))
    except ipaddress.AddressValueError as e:
        raise ValueError(f"Invalid IP or netmask: {ip_address}/{netmask}") from e
    return str(ipaddress.IPv4Address(ip_int | (~mask_int & 0xFFFFFFFF)))


def subnet_base_24(ip_address: str) -> str:
    """
    Return the first three octets of an address followed by a dot.

    >>> subnet_base_24("192.168.1.37")
    '192.168.1.'
    """
    return ip_address[: ip_address.rindex(".") + 1]


def extract_ipv4(text: str) -> Optional[str]:
    """
    Return the first IPv4-shaped literal in a line of text, if any.
    """
    match = _IPV4_PATTERN.search(text)
    return match.group(0) if match else None
