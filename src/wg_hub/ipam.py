# src/wg_hub/ipam.py
from __future__ import annotations
import ipaddress
from typing import Union

from .models import AddressError, AddressExhausted, InvalidCIDR

IPNetwork = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]
IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def parse_network(cidr: str) -> IPNetwork:
    try:
        return ipaddress.ip_network(cidr, strict=False)
    except (ValueError, TypeError) as e:
        raise InvalidCIDR(f"invalid cidr {cidr!r}: {e}") from e


def prefix_length(cidr: str) -> int:
    return parse_network(cidr).prefixlen


def host_mask(cidr: str) -> int:
    # 32 en IPv4, 128 en IPv6
    return parse_network(cidr).max_prefixlen


def _last_usable(net: IPNetwork) -> IPAddress:
    # /31, /32 (et équivalents v6) n'ont pas d'adresse de broadcast à exclure
    if net.num_addresses <= 2:
        return net.broadcast_address
    return net.broadcast_address - 1


def allocate(cidr: str, ordinal: int) -> IPAddress:
    """
    Adresse de rang `ordinal` dans le réseau.
    L'ordinal 0 est la première adresse utilisable (le serveur),
    les membres utilisent 1 + leur index dans la liste d'origine.
    """
    if ordinal < 0:
        raise AddressError(f"ordinal must be >= 0, got {ordinal}")

    net = parse_network(cidr)
    first = net.network_address + 1 if net.num_addresses > 2 else net.network_address

    if int(first) + ordinal > int(_last_usable(net)):
        raise AddressExhausted(
            f"ordinal {ordinal} is outside the usable range of {net}"
        )
    return first + ordinal


def server_address(cidr: str) -> str:
    """Retourne l'adresse du serveur sous forme '10.0.0.1/24'"""
    return f"{allocate(cidr, 0)}/{prefix_length(cidr)}"


def member_address(cidr: str, index: int) -> str:
    """Retourne l'adresse /32 du membre d'index `index` (0-based)"""
    return f"{allocate(cidr, index + 1)}/{host_mask(cidr)}"
