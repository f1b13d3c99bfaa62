import pytest

from ovsflows.fields import VLAN_NONE, data_link_vlan, icmp_type
from ovsflows.masked import (
    CTState,
    TCPFlag,
    connection_tracking_state,
    set_state,
    set_tcp_flag,
    tcp_flags,
    unset_state,
    unset_tcp_flag,
)
from ovsflows.match import MatchError, ipv6_destination, network_source
from ovsflows.parser import parse_match


@pytest.mark.parametrize(
    "key, value",
    [
        ("icmp_type", "3"),
        ("icmp_code", "1"),
        ("icmpv6_type", "135"),
        ("icmpv6_code", "3"),
        ("nw_proto", "6"),
        ("ct_zone", "1"),
        ("conj_id", "11111"),
        ("in_port", "74"),
        ("nw_ttl", "64"),
        ("nw_tos", "16"),
        ("tun_gbp_id", "5"),
        ("tp_dst", "22"),
        ("udp_src", "80"),
        ("tp_src", "0x0010/0xfff0"),
        ("udp_dst", "0x0010/0xfff0"),
        ("nw_src", "192.168.1.1"),
        ("nw_dst", "169.254.0.0/16"),
        ("arp_spa", "192.168.1.1"),
        ("arp_tpa", "169.254.0.0/16"),
        ("dl_src", "de:ad:be:ef:de:ad"),
        ("dl_dst", "de:ad:be:ef:de:ad/ff:ff:ff:ff:ff:ff"),
        ("ipv6_src", "2001:db8::1"),
        ("ipv6_dst", "2001:db8::1/128"),
        ("nd_target", "2001:db8::1"),
        ("arp_sha", "de:ad:be:ef:de:ad"),
        ("arp_tha", "de:ad:be:ef:de:ad"),
        ("nd_sll", "de:ad:be:ef:de:ad"),
        ("nd_tll", "de:ad:be:ef:de:ad"),
        ("dl_type", "0x0806"),
        ("dl_vlan", "10"),
        ("dl_vlan_pcp", "7"),
        ("vlan_tci", "0x1000/0x1000"),
        ("vlan_tci1", "0x1000/0x1000"),
        ("ct_mark", "0x00001000/0x00001000"),
        ("ipv6_label", "0x01000/0xfffff"),
        ("metadata", "0xa"),
        ("tun_id", "0xa0/0xf0"),
        ("arp_op", "1"),
        ("ct_state", "+new-trk"),
        ("tcp_flags", "+syn-ack"),
    ],
)
def test_round_trip(key, value):
    assert parse_match(key, value).marshal_text() == f"{key}={value}"


def test_ct_state_bar_separated():
    expected = connection_tracking_state(
        set_state(CTState.ESTABLISHED), set_state(CTState.TRACKED)
    )
    assert parse_match("ct_state", "est|trk") == expected


def test_ct_state_single_state():
    assert parse_match("ct_state", "trk") == connection_tracking_state(
        set_state(CTState.TRACKED)
    )


def test_ct_state_multiple_flags():
    expected = connection_tracking_state(
        set_state(CTState.NEW), set_state(CTState.RELATED), set_state(CTState.TRACKED)
    )
    assert parse_match("ct_state", "+new+rel+trk") == expected


def test_ct_state_unset():
    assert parse_match("ct_state", "-trk") == connection_tracking_state(
        unset_state(CTState.TRACKED)
    )


def test_tcp_flags_split_into_fours():
    expected = tcp_flags(
        set_tcp_flag(TCPFlag.SYN), unset_tcp_flag(TCPFlag.PSH), set_tcp_flag(TCPFlag.ACK)
    )
    assert parse_match("tcp_flags", "+syn-psh+ack") == expected


def test_tcp_flags_decimal_kept_whole():
    assert parse_match("tcp_flags", "18") == tcp_flags("18")


def test_tcp_flags_bad_length():
    with pytest.raises(MatchError):
        parse_match("tcp_flags", "+sy")


def test_tunnel_source_uses_network_source():
    assert parse_match("tun_src", "10.0.0.1") == network_source("10.0.0.1")


def test_tunnel_ipv6_destination_uses_ipv6_destination():
    assert parse_match("tun_ipv6_dst", "2001:db8::1") == ipv6_destination("2001:db8::1")


def test_unknown_key_returns_none():
    assert parse_match("priority", "10") is None


def test_dl_vlan_none():
    assert parse_match("dl_vlan", "0xffff") == data_link_vlan(VLAN_NONE)


@pytest.mark.parametrize(
    "key, decimal, hexadecimal",
    [
        ("dl_vlan", "10", "0xa"),
        ("dl_vlan_pcp", "7", "0x7"),
        ("vlan_tci", "4096/4096", "0x1000/0x1000"),
        ("ct_mark", "4096", "0x1000"),
        ("ipv6_label", "4096/4096", "0x1000/0x1000"),
        ("metadata", "10", "0xa"),
        ("tun_id", "160/240", "0xa0/0xf0"),
        ("arp_op", "2", "0x2"),
    ],
)
def test_decimal_and_hex_agree(key, decimal, hexadecimal):
    assert parse_match(key, decimal) == parse_match(key, hexadecimal)


def test_single_value_means_no_mask():
    assert parse_match("vlan_tci", "0x1000") == parse_match("vlan_tci", "0x1000/0")


def test_negative_icmp_type_truncated():
    assert parse_match("icmp_type", "-1") == icmp_type(255)


def test_vlan_pcp_out_of_range_fails_on_marshal():
    match = parse_match("dl_vlan_pcp", "8")
    with pytest.raises(MatchError):
        match.marshal_text()


@pytest.mark.parametrize(
    "key, value",
    [
        ("icmp_type", "256"),
        ("icmp_type", "abc"),
        ("nw_proto", "1.5"),
        ("ct_zone", "65536"),
        ("nw_ttl", "2147483648"),
        ("tp_src", "1/2/3"),
        ("tp_src", "0x10000/0xffff"),
        ("udp_dst", "zz/0xffff"),
        ("vlan_tci", "10/10/10"),
        ("vlan_tci1", "10/10/10"),
        ("ipv6_label", "10/10/10"),
        ("ct_mark", "10/10/10"),
        ("metadata", "1/2/3"),
        ("tun_id", "zz"),
        ("arp_op", "70000"),
        ("arp_op", "-1"),
        ("dl_type", "0x"),
        ("dl_vlan", "ten"),
        ("arp_sha", "foo"),
        ("nd_sll", "de:ad:be:ef"),
    ],
)
def test_invalid_values_raise(key, value):
    with pytest.raises(MatchError):
        parse_match(key, value)


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        parse_match("conj_id", "4294967296")