"""Build, parse and marshal Open vSwitch OpenFlow matches, match flows and flow bundles."""

__version__ = "0.1.0"