import pytest

from tapo_locator.utils.network_utils import (
    normalize_mac, mac_in_text, directed_broadcast, subnet_base_24, extract_ipv4, is_valid_ip
)


@pytest.mark.parametrize("raw", [
    "AA:BB:CC:DD:EE:FF",
    "aa-bb-cc-dd-ee-ff",
    "AABBCCDDEEFF",
    "Aa:bB-cC:Dd-eE:fF",
])
def test_normalize_mac_is_format_invariant(raw):
    assert normalize_mac(raw) == "aabbccddeeff"


def test_normalize_mac_is_idempotent():
    once = normalize_mac("AA-BB-CC-DD-EE-FF")
    assert normalize_mac(once) == once


def test_normalize_mac_handles_empty_input():
    assert normalize_mac("") == ""
    assert normalize_mac(None) == ""


def test_mac_in_text_finds_mac_inside_json_payload():
    payload = '{"result":{"deviceMac":"AA-BB-CC-DD-EE-FF","ip":"10.0.0.9"}}'
    assert mac_in_text("aa:bb:cc:dd:ee:ff", payload)


def test_mac_in_text_rejects_other_mac():
    assert not mac_in_text("aa:bb:cc:dd:ee:ff", "11:22:33:44:55:66")


def test_empty_target_never_matches():
    assert not mac_in_text("", "anything at all")
    assert not mac_in_text(":-:", "anything at all")


def test_directed_broadcast_for_class_c():
    assert directed_broadcast("192.168.1.37", "255.255.255.0") == "192.168.1.255"


def test_directed_broadcast_for_wider_mask():
    assert directed_broadcast("10.20.30.40", "255.255.240.0") == "10.20.31.255"


def test_directed_broadcast_rejects_invalid_mask():
    with pytest.raises(ValueError):
        directed_broadcast("192.168.1.37", "not-a-mask")


def test_subnet_base_24():
    assert subnet_base_24("192.168.1.37") == "192.168.1."


def test_extract_ipv4_returns_first_literal():
    line = "? (192.168.1.50) at aa:bb:cc:dd:ee:ff on en0 ifscope [ethernet] 10.0.0.1"
    assert extract_ipv4(line) == "192.168.1.50"


def test_extract_ipv4_without_address():
    assert extract_ipv4("no address here") is None


def test_is_valid_ip():
    assert is_valid_ip("192.168.1.1")
    assert not is_valid_ip("192.168.1")
