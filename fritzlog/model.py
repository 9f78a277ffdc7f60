"""Models for gateway devices."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import IntFlag

from .exceptions import ApiError
from .xmlutil import (
    get_attrib,
    get_child,
    get_child_text,
    get_int,
    parse_document,
)

ROOT_NAME = "devicelist"
DEVICE_TAGS = ("device", "group")


class Functions(IntFlag):
    """Capabilities announced by a device's functionbitmask."""

    HANFUN_DEVICE = 1 << 0
    ALARM_SENSOR = 1 << 4
    RADIATOR_CONTROL = 1 << 6
    ENERGY_METER = 1 << 7
    TEMPERATURE_SENSOR = 1 << 8
    SWITCH_SOCKET = 1 << 9
    AVM_DECT_REPEATER = 1 << 10
    MICROPHONE = 1 << 11
    HANFUN_UNIT = 1 << 13


_KNOWN_FUNCTIONS = sum(flag.value for flag in Functions)


@dataclass(frozen=True)
class Common:
    """Attributes every device and group carries."""

    unique_id: str
    internal_id: int
    functions: Functions
    fwversion: str
    manufacturer: str
    productname: str
    name: str
    present: bool

    @classmethod
    def parse(cls, node: ET.Element) -> Common:
        present = get_child_text(node, "present")
        if present not in ("0", "1"):
            raise ApiError("Present must be 0 or 1")
        bitmask = get_int(get_attrib(node, "functionbitmask"), "functions")
        return cls(
            unique_id=get_attrib(node, "identifier"),
            internal_id=get_int(get_attrib(node, "id"), "id"),
            functions=Functions(bitmask & _KNOWN_FUNCTIONS),
            fwversion=get_attrib(node, "fwversion"),
            manufacturer=get_attrib(node, "manufacturer"),
            productname=get_attrib(node, "productname"),
            name=get_child_text(node, "name"),
            present=present == "1",
        )


@dataclass(frozen=True)
class Temperature:
    """Temperature reading in 0.1 °C steps."""

    temperature: int
    offset: int

    @classmethod
    def parse(cls, node: ET.Element) -> Temperature:
        temp = get_child(node, "temperature")
        return cls(
            temperature=get_int(get_child_text(temp, "celsius"), "temperature"),
            offset=get_int(get_child_text(temp, "offset"), "offset"),
        )


@dataclass(frozen=True)
class Powermeter:
    """Energy reading: voltage in mV, power in mW, energy in Wh."""

    voltage: int
    power: int
    energy: int

    @classmethod
    def parse(cls, node: ET.Element) -> Powermeter:
        power = get_child(node, "powermeter")
        return cls(
            voltage=get_int(get_child_text(power, "voltage"), "voltage"),
            power=get_int(get_child_text(power, "power"), "power"),
            energy=get_int(get_child_text(power, "energy"), "energy"),
        )


@dataclass(frozen=True)
class Device:
    """Dataclass for one device or group of the device list."""

    common: Common
    temperature: Temperature | None = None
    powermeter: Powermeter | None = None

    @classmethod
    def parse(cls, node: ET.Element) -> Device:
        common = Common.parse(node)
        temperature = None
        powermeter = None

        if Functions.TEMPERATURE_SENSOR in common.functions:
            temperature = Temperature.parse(node)
        if Functions.ENERGY_METER in common.functions:
            powermeter = Powermeter.parse(node)

        return cls(common=common, temperature=temperature, powermeter=powermeter)


DeviceSnapshot = tuple[Device, ...]


def parse_devices(body: str) -> DeviceSnapshot:
    """Parse a getdevicelistinfos document into an immutable snapshot."""
    root = parse_document(body, "device")
    device_list = root if root.tag == ROOT_NAME else get_child(root, ROOT_NAME)
    return tuple(
        Device.parse(node) for node in device_list if node.tag in DEVICE_TAGS
    )
