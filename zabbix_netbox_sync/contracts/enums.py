"""Canonical enumerations for the host facts contract."""

from __future__ import annotations

from enum import Enum


class ObjType(str, Enum):
    VIRTUAL = "Virtual"
    PHYSICAL = "Physical"


class InterfaceMode(str, Enum):
    """802.1Q mode of a NetBox interface."""

    ACCESS = "access"
    TAGGED = "tagged"
    TAGGED_ALL = "tagged-all"
