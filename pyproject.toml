[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ovsflows"
version = "0.1.0"
description = "Build, parse and marshal Open vSwitch OpenFlow match statements, match flows and flow bundles"
requires-python = ">=3.10"
dependencies = []
keywords = ["openvswitch", "ovs", "openflow", "sdn", "networking", "flows"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ovsflows"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
