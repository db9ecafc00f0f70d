"""Item key / value dissectors used by the scanner.

Keys are split on ``[`` / ``]`` instead of a single regex so that
unknown address families (``net.if.ip5[...]``) parse the same way.

  net.if.ip4["eth2"]                        → ("eth2", "ip4")
  vfs.file.contents["/sys/class/net/eth2/type"] → "/sys/class/net/eth2/type"
  /sys/class/net/eth2/type                  → ("eth2", "type")
"""

from __future__ import annotations

import logging
import re

import yaml

log = logging.getLogger(__name__)

INTERFACE_PREFIX = "net.if."
FILE_CONTENTS_PREFIX = "vfs.file.contents["
SYSFS_NET_PREFIX = "/sys/class/net/"
SYSFS_ATTRIBUTES = frozenset({"type", "mtu", "address"})

_MAC_RE = re.compile(r"^[0-9a-fA-F]{2}(:[0-9a-fA-F]{2}){5}$")
_NULL_MAC = "00:00:00:00:00:00"

INT32_MAX = 2**31 - 1
INT64_MAX = 2**63 - 1


class MetadataError(ValueError):
    """sys.hw.metadata is not a flat mapping."""


# ── Key detection ────────────────────────────────────────────────────────


def is_interface_metric(key: str) -> bool:
    return key.startswith(INTERFACE_PREFIX) and "[" in key and key.endswith("]")


def is_file_contents_metric(key: str) -> bool:
    return key.startswith(FILE_CONTENTS_PREFIX) and key.endswith("]")


def is_sysfs_net_path(path: str) -> bool:
    parts = path.split("/")
    return (
        path.startswith(SYSFS_NET_PREFIX)
        and len(parts) == 6
        and bool(parts[4])
        and parts[5] in SYSFS_ATTRIBUTES
    )


# ── Key dissection ───────────────────────────────────────────────────────


def _split_key(key: str) -> tuple[str, str]:
    """``prefix[arg]`` → (prefix, arg)."""
    prefix, _, rest = key.partition("[")
    return prefix, rest[:-1] if rest.endswith("]") else rest


def _first_param(arg: str) -> str:
    """First item-key parameter, with surrounding quotes removed."""
    arg = arg.strip()
    if arg.startswith('"'):
        end = arg.find('"', 1)
        return arg[1:end] if end > 0 else arg[1:]
    return arg.split(",", 1)[0].strip()


def parse_interface_metric(key: str, value: str) -> tuple[str, str, list[str]]:
    """Return (interface name, address family, addresses).

    The family is the third dot-separated token of the prefix; an absent
    token yields an empty family. Empty lines of *value* are dropped.
    """
    prefix, arg = _split_key(key)
    tokens = prefix.split(".", 2)
    family = tokens[2] if len(tokens) == 3 else ""
    name = _first_param(arg)
    addresses = [a.strip() for a in value.split("\n") if a.strip()]
    log.debug("parse_interface_metric() family=%r name=%r addresses=%s", family, name, addresses)
    return name, family, addresses


def parse_file_contents_metric(key: str) -> str:
    """Return the file path of a ``vfs.file.contents[...]`` key."""
    _, arg = _split_key(key)
    return _first_param(arg)


def parse_sysfs_net_path(path: str) -> tuple[str, str]:
    """``/sys/class/net/<ifname>/<attr>`` → (ifname, attr)."""
    parts = path.split("/")
    return parts[4], parts[5]


# ── Value parsing ────────────────────────────────────────────────────────


def parse_int(value: str, bits: int = 32) -> int:
    """Parse a base-10 signed integer that fits into *bits* bits.

    Raises:
        ValueError: not an integer, or out of range.
    """
    number = int(value.strip(), 10)
    limit = 2 ** (bits - 1)
    if not -limit <= number < limit:
        raise ValueError(f"{number} does not fit into {bits} bits")
    return number


def bytes_to_mib(value: str) -> int:
    """Byte count → whole MiB (floor), capped to the int32 range."""
    mib = parse_int(value, bits=64) // (1 << 20)
    if mib > INT32_MAX:
        log.warning("Memory size %d MiB exceeds 32 bit, capping", mib)
        return INT32_MAX
    return mib


def parse_mac_address(value: str) -> str | None:
    """Normalise a MAC to upper-case colon form; None for null/invalid."""
    mac = value.strip()
    if not _MAC_RE.match(mac) or mac == _NULL_MAC:
        return None
    return mac.upper()


def parse_host_metadata(raw: str) -> tuple[dict[str, str], bool]:
    """Parse the ``sys.hw.metadata`` YAML document.

    Returns:
        (metadata, ok) — ``ok`` is False for an empty document.

    Raises:
        MetadataError: invalid YAML or not a flat string mapping.
    """
    try:
        # BaseLoader keeps every scalar as written: "on", "no", "010"
        data = yaml.load(raw, Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        raise MetadataError(str(exc)) from exc

    if data is None:
        return {}, False
    if not isinstance(data, dict):
        raise MetadataError(f"expected a mapping, got {type(data).__name__}")

    metadata: dict[str, str] = {}
    for k, v in data.items():
        if isinstance(v, (dict, list)):
            raise MetadataError(f"value of '{k}' is not a scalar")
        metadata[str(k)] = "" if v is None else str(v)

    log.debug("parse_host_metadata() unmarshalled %s", metadata)
    return metadata, bool(metadata)
