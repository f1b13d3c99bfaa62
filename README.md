# ovsflows

Build and parse the textual OpenFlow match statements used by Open vSwitch,
assemble match flows for deletion and dumping, prepare flow bundles for
atomic addition and deletion, and split `ovs-ofctl dump-*` output into
records.

The package has no dependencies outside the standard library.

## Installation

```
pip install ovsflows
```

For running the tests:

```
pip install "ovsflows[test]"
pytest
```

## Matches

Every match has a `marshal_text()` method that returns its OpenFlow text.
Invalid values raise `ovsflows.match.MatchError` (a `ValueError`), either
when the match is built (values that do not fit their field width) or when
it is marshaled (bad addresses, out-of-range VLAN IDs and the like).
`repr()` of a match gives the call that builds it.

The matches are spread over three modules:

- `ovsflows.match` — address matches: `data_link_source`,
  `data_link_destination` (with optional `/mask`), `network_source`,
  `network_destination`, `tunnel_src`, `tunnel_dst`,
  `arp_source_protocol_address`, `arp_target_protocol_address`,
  `ipv6_source`, `ipv6_destination`, `neighbor_discovery_target`,
  `arp_source_hardware_address`, `arp_target_hardware_address`,
  `neighbor_discovery_source_link_layer`,
  `neighbor_discovery_target_link_layer`, and `parse_mac` to turn a
  hardware address string into bytes.
- `ovsflows.fields` — integer matches: `data_link_type`, `data_link_vlan`
  (with `VLAN_NONE` for untagged packets), `data_link_vlan_pcp`,
  `network_ecn`, `network_tos`, `network_ttl`, `network_protocol`,
  `tunnel_gbp`, `tunnel_gbp_flags`, `tunnel_flags`, `tunnel_ttl`,
  `tunnel_tos`, `conjunction_id`, `icmp_type`, `icmp_code`, `icmp6_type`,
  `icmp6_code`, `in_port_match`, `arp_operation`,
  `connection_tracking_zone`.
- `ovsflows.masked` — ports, masked values and flags:
  `transport_*_port`, `transport_*_masked_port`, `udp_*_port`,
  `udp_*_masked_port`, `vlan_tci`, `vlan_tci1`, `ipv6_label`, `arp_op`,
  `connection_tracking_mark`, `connection_tracking_state` with
  `set_state`/`unset_state` and `CTState`, `tcp_flags` with
  `set_tcp_flag`/`unset_tcp_flag` and `TCPFlag`, `metadata`,
  `metadata_with_mask`, `tunnel_id`, `tunnel_id_with_mask`, `ip_frag` with
  `IPFragFlag`, and `field_match` for any `field=value` pair.

```python
from ovsflows.match import data_link_source, network_destination
from ovsflows.fields import data_link_vlan
from ovsflows.masked import connection_tracking_state, set_state, unset_state, CTState

data_link_source("02:00:00:00:00:01").marshal_text()
# 'dl_src=02:00:00:00:00:01'

network_destination("192.168.1.0/24").marshal_text()
# 'nw_dst=192.168.1.0/24'

data_link_vlan(10).marshal_text()
# 'dl_vlan=10'

connection_tracking_state(set_state(CTState.NEW), unset_state(CTState.TRACKED)).marshal_text()
# 'ct_state=+new-trk'
```

## Parsing matches

`ovsflows.parser.parse_match(key, value)` turns a single `key=value` pair,
as printed by `ovs-ofctl`, back into a match object. Unknown keys give
`None`; malformed values raise `MatchError`.

```python
from ovsflows.parser import parse_match

parse_match("tp_dst", "0xea60/0xffe0").marshal_text()
# 'tp_dst=0xea60/0xffe0'

parse_match("ct_state", "est|trk").marshal_text()
# 'ct_state=+est+trk'
```

## Match flows

`ovsflows.matchflow.MatchFlow` selects existing flows by protocol, input
port, matches, table and cookie (with optional cookie mask). Use
`ANY_TABLE` to leave the table out and `PORT_LOCAL` for the LOCAL port.

```python
from ovsflows.matchflow import MatchFlow
from ovsflows.match import network_destination
from ovsflows.masked import transport_destination_port

flow = MatchFlow(
    protocol="tcp",
    matches=[network_destination("192.0.2.1"), transport_destination_port(22)],
    table=45,
)
flow.marshal_text()
# 'tcp,nw_dst=192.0.2.1,tp_dst=22,table=45'
```

A match flow that renders to nothing raises `MatchFlowError`.

## Flow bundles

`ovsflows.openflow.build_flow_bundle(fn)` runs `fn` with a
`FlowTransaction`. The function queues flows with `add()` and match flows
with `delete()` — anything with a `marshal_text()` method — and must call
`commit()`. The bundle text, one `add ...` or `delete ...` line per flow,
is returned.

- The first flow that fails to marshal makes later additions no-ops, and
  `commit()` raises its error.
- A transaction left uncommitted raises `NotCommittedError`.
- `discard(err)` drops the queued flows and raises `NotCommittedError`
  wrapping `err`.

```python
from ovsflows.openflow import build_flow_bundle
from ovsflows.matchflow import MatchFlow

def fill(tx):
    tx.delete(MatchFlow(cookie=0xdeadbeef))
    tx.commit()

build_flow_bundle(fill)
# 'delete cookie=0x00000000deadbeef/-1,table=0\n'
```

## Splitting tool output

`parse_each(data, prefix)` and `parse_each_line(data, prefix)` take the
raw bytes printed by `ovs-ofctl` and yield records: two joined lines per
record for port and table statistics (skipping the extra lines printed
under OpenFlow 1.x and with custom statistics), or one line per record for
flow dumps. The prefixes `DUMP_PORTS_PREFIX`, `DUMP_TABLES_PREFIX` and
`DUMP_FLOWS_PREFIX` are provided. Empty, truncated or wrongly headed
output raises `UnexpectedEOFError`.

## Shared values

`ovsflows.common` holds the `FailMode`, `InterfaceType` and `PortAction`
enumerations, `OvsError` for a failed control-program call with its
output, and `is_port_not_exist(err)` to recognise the "no port named"
failure.

## What this package does not do

It does not run `ovs-ofctl` or `ovs-vsctl`, and it talks to no switch: it
only produces and reads their text. It has no objects for flows with
actions, and does not turn port, table or flow records into statistics
objects; `parse_each` and `parse_each_line` hand back the raw record bytes.