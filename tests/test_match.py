import pytest

from ovsflows.match import (
    MatchError,
    arp_source_hardware_address,
    arp_source_protocol_address,
    arp_target_hardware_address,
    arp_target_protocol_address,
    data_link_destination,
    data_link_source,
    ipv6_destination,
    ipv6_source,
    neighbor_discovery_source_link_layer,
    neighbor_discovery_target,
    neighbor_discovery_target_link_layer,
    network_destination,
    network_source,
    parse_mac,
    tunnel_dst,
    tunnel_src,
)

MAC = "de:ad:be:ef:de:ad"
LONG_MAC = "de:ad:be:ef:de:ad:be:ef"


@pytest.mark.parametrize(
    "match",
    [
        data_link_source("foo"),
        data_link_source(LONG_MAC),
        data_link_destination("foo"),
        data_link_destination(LONG_MAC),
        data_link_source(MAC + "/foo"),
        data_link_source(MAC + "/00:11:22:33:44:55:66:77"),
        data_link_destination(MAC + "/foo"),
        data_link_destination(MAC + "/00:11:22:33:44:55:66:77"),
    ],
)
def test_data_link_invalid(match):
    with pytest.raises(MatchError):
        match.marshal_text()


@pytest.mark.parametrize(
    "match, out",
    [
        (data_link_source(MAC), "dl_src=de:ad:be:ef:de:ad"),
        (data_link_destination(MAC), "dl_dst=de:ad:be:ef:de:ad"),
        (
            data_link_source(MAC + "/ff:ff:ff:ff:ff:ff"),
            "dl_src=de:ad:be:ef:de:ad/ff:ff:ff:ff:ff:ff",
        ),
        (
            data_link_destination(MAC + "/ff:ff:ff:ff:ff:ff"),
            "dl_dst=de:ad:be:ef:de:ad/ff:ff:ff:ff:ff:ff",
        ),
        (data_link_source("DE-AD-BE-EF-DE-AD"), "dl_src=de:ad:be:ef:de:ad"),
    ],
)
def test_data_link(match, out):
    assert match.marshal_text() == out


@pytest.mark.parametrize(
    "match",
    [
        network_source("foo"),
        network_destination("foo"),
        arp_source_protocol_address("foo"),
        arp_target_protocol_address("foo"),
        network_source("2001:db8::1"),
        network_destination("2001:db8::1"),
        arp_source_protocol_address("2001:db8::1"),
        arp_target_protocol_address("2001:db8::1"),
        network_source("2001:db8::1/128"),
        network_destination("2001:db8::1/128"),
        arp_source_protocol_address("2001:db8::1/128"),
        arp_target_protocol_address("2001:db8::1/128"),
        network_source("192.168.1.0/33"),
        tunnel_src("foo"),
    ],
)
def test_ipv4_invalid(match):
    with pytest.raises(MatchError, match="not a valid IPv4"):
        match.marshal_text()


@pytest.mark.parametrize(
    "match, out",
    [
        (network_source("192.168.1.1"), "nw_src=192.168.1.1"),
        (network_destination("192.168.1.1"), "nw_dst=192.168.1.1"),
        (arp_source_protocol_address("192.168.1.1"), "arp_spa=192.168.1.1"),
        (arp_target_protocol_address("192.168.1.1"), "arp_tpa=192.168.1.1"),
        (network_source("192.168.1.0/24"), "nw_src=192.168.1.0/24"),
        (network_destination("192.168.1.0/24"), "nw_dst=192.168.1.0/24"),
        (arp_source_protocol_address("192.168.1.0/24"), "arp_spa=192.168.1.0/24"),
        (arp_target_protocol_address("192.168.1.0/24"), "arp_tpa=192.168.1.0/24"),
        (tunnel_src("10.0.0.1"), "tun_src=10.0.0.1"),
        (tunnel_dst("10.0.0.0/8"), "tun_dst=10.0.0.0/8"),
    ],
)
def test_ipv4(match, out):
    assert match.marshal_text() == out


@pytest.mark.parametrize(
    "match",
    [
        ipv6_source("foo"),
        ipv6_destination("foo"),
        neighbor_discovery_target("foo"),
        ipv6_source("192.168.1.1"),
        ipv6_destination("192.168.1.1"),
        neighbor_discovery_target("192.168.1.1"),
        ipv6_source("192.168.1.0/24"),
        ipv6_destination("192.168.1.0/24"),
        neighbor_discovery_target("192.168.1.0/24"),
    ],
)
def test_ipv6_invalid(match):
    with pytest.raises(MatchError, match="not a valid IPv6"):
        match.marshal_text()


@pytest.mark.parametrize(
    "match, out",
    [
        (ipv6_source("2001:db8::1"), "ipv6_src=2001:db8::1"),
        (ipv6_destination("2001:db8::1"), "ipv6_dst=2001:db8::1"),
        (neighbor_discovery_target("2001:db8::1"), "nd_target=2001:db8::1"),
        (ipv6_source("2001:db8::1/128"), "ipv6_src=2001:db8::1/128"),
        (ipv6_destination("2001:db8::1/128"), "ipv6_dst=2001:db8::1/128"),
        (neighbor_discovery_target("2001:db8::1/128"), "nd_target=2001:db8::1/128"),
        (ipv6_source("2001:db8::a001/124"), "ipv6_src=2001:db8::a001/124"),
    ],
)
def test_ipv6(match, out):
    assert match.marshal_text() == out


@pytest.mark.parametrize(
    "match",
    [
        arp_source_hardware_address(parse_mac(LONG_MAC)),
        arp_target_hardware_address(parse_mac(LONG_MAC)),
        neighbor_discovery_source_link_layer(parse_mac(LONG_MAC)),
        neighbor_discovery_target_link_layer(parse_mac(LONG_MAC)),
    ],
)
def test_ethernet_hardware_address_invalid(match):
    with pytest.raises(MatchError, match="must be 6 octets, but got 8"):
        match.marshal_text()


@pytest.mark.parametrize(
    "match, out",
    [
        (arp_source_hardware_address(parse_mac(MAC)), "arp_sha=de:ad:be:ef:de:ad"),
        (arp_target_hardware_address(parse_mac(MAC)), "arp_tha=de:ad:be:ef:de:ad"),
        (
            neighbor_discovery_source_link_layer(parse_mac(MAC)),
            "nd_sll=de:ad:be:ef:de:ad",
        ),
        (
            neighbor_discovery_target_link_layer(parse_mac(MAC)),
            "nd_tll=de:ad:be:ef:de:ad",
        ),
    ],
)
def test_ethernet_hardware_address(match, out):
    assert match.marshal_text() == out


@pytest.mark.parametrize(
    "text, expected",
    [
        ("de:ad:be:ef:de:ad", b"\xde\xad\xbe\xef\xde\xad"),
        ("DE-AD-BE-EF-DE-AD", b"\xde\xad\xbe\xef\xde\xad"),
        ("dead.beef.dead", b"\xde\xad\xbe\xef\xde\xad"),
        (LONG_MAC, b"\xde\xad\xbe\xef\xde\xad\xbe\xef"),
    ],
)
def test_parse_mac(text, expected):
    assert parse_mac(text) == expected


@pytest.mark.parametrize(
    "text",
    ["foo", "de:ad:be:ef:de", "de:ad-be:ef:de:ad", "zz:ad:be:ef:de:ad", "de:ad:be:ef:de:ad:"],
)
def test_parse_mac_invalid(text):
    with pytest.raises(MatchError, match="invalid MAC address"):
        parse_mac(text)


@pytest.mark.parametrize(
    "match, text",
    [
        (data_link_source(MAC), "data_link_source('de:ad:be:ef:de:ad')"),
        (data_link_destination(MAC), "data_link_destination('de:ad:be:ef:de:ad')"),
        (network_source("192.168.1.1"), "network_source('192.168.1.1')"),
        (network_destination("192.168.1.1"), "network_destination('192.168.1.1')"),
        (ipv6_source("2001:db8::1"), "ipv6_source('2001:db8::1')"),
        (ipv6_destination("2001:db8::1"), "ipv6_destination('2001:db8::1')"),
        (
            neighbor_discovery_target("2001:db8::1"),
            "neighbor_discovery_target('2001:db8::1')",
        ),
        (
            neighbor_discovery_source_link_layer(parse_mac(MAC)),
            "neighbor_discovery_source_link_layer(b'\\xde\\xad\\xbe\\xef\\xde\\xad')",
        ),
        (
            neighbor_discovery_target_link_layer(parse_mac(MAC)),
            "neighbor_discovery_target_link_layer(b'\\xde\\xad\\xbe\\xef\\xde\\xad')",
        ),
        (
            arp_source_hardware_address(parse_mac(MAC)),
            "arp_source_hardware_address(b'\\xde\\xad\\xbe\\xef\\xde\\xad')",
        ),
        (
            arp_target_hardware_address(parse_mac(MAC)),
            "arp_target_hardware_address(b'\\xde\\xad\\xbe\\xef\\xde\\xad')",
        ),
        (
            arp_source_protocol_address("192.168.1.1"),
            "arp_source_protocol_address('192.168.1.1')",
        ),
        (
            arp_target_protocol_address("192.168.1.1"),
            "arp_target_protocol_address('192.168.1.1')",
        ),
        (tunnel_src("10.0.0.1"), "tunnel_src('10.0.0.1')"),
        (tunnel_dst("10.0.0.1"), "tunnel_dst('10.0.0.1')"),
    ],
)
def test_repr(match, text):
    assert repr(match) == text


def test_matches_compare_by_value():
    assert data_link_source(MAC) == data_link_source(MAC)
    assert data_link_source(MAC) != data_link_destination(MAC)
    assert arp_source_hardware_address(bytearray(parse_mac(MAC))) == (
        arp_source_hardware_address(parse_mac(MAC))
    )