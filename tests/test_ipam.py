"""Tests for positional address allocation."""

import ipaddress

import pytest

from wg_hub.ipam import (
    allocate,
    host_mask,
    member_address,
    parse_network,
    prefix_length,
    server_address,
)
from wg_hub.models import AddressError, AddressExhausted, InvalidCIDR


def test_server_takes_first_usable_address():
    assert server_address("10.0.0.0/24") == "10.0.0.1/24"


def test_members_follow_server():
    assert member_address("10.0.0.0/24", 0) == "10.0.0.2/32"
    assert member_address("10.0.0.0/24", 1) == "10.0.0.3/32"


def test_allocate_is_ordinal_offset():
    assert allocate("10.0.0.0/24", 0) == ipaddress.ip_address("10.0.0.1")
    assert allocate("10.0.0.0/24", 5) == ipaddress.ip_address("10.0.0.6")


def test_host_bits_are_ignored():
    assert server_address("10.0.0.77/24") == "10.0.0.1/24"


def test_prefix_and_host_mask():
    assert prefix_length("172.16.0.0/12") == 12
    assert host_mask("10.0.0.0/24") == 32
    assert host_mask("fd00::/64") == 128


def test_ipv6_member_address():
    assert member_address("fd00::/64", 0) == "fd00::2/128"


def test_last_usable_address():
    # .254 is ordinal 253, broadcast .255 is never handed out
    assert allocate("10.0.0.0/24", 253) == ipaddress.ip_address("10.0.0.254")
    with pytest.raises(AddressExhausted):
        allocate("10.0.0.0/24", 254)


def test_small_network_exhausts_quickly():
    # /30: .1 server, .2 first member, .3 broadcast
    assert member_address("10.0.0.0/30", 0) == "10.0.0.2/32"
    with pytest.raises(AddressExhausted):
        member_address("10.0.0.0/30", 1)


def test_negative_ordinal():
    with pytest.raises(AddressError):
        allocate("10.0.0.0/24", -1)


@pytest.mark.parametrize("bad", ["", "10.0.0.0/33", "not-a-cidr", "300.1.1.1/24"])
def test_invalid_cidr(bad):
    with pytest.raises(InvalidCIDR):
        parse_network(bad)


def test_allocation_is_pure():
    assert [member_address("10.9.0.0/16", i) for i in range(3)] == [
        member_address("10.9.0.0/16", i) for i in range(3)
    ]
