[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bonami"
version = "1.0.0"
description = "mDNS / DNS-SD data model, DNS wire-format codec and a client for a message-port daemon"
requires-python = ">=3.10"
dependencies = []
keywords = ["mdns", "dns-sd", "zeroconf", "service-discovery", "dns"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
bactl = "bonami.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["bonami"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
