import pytest

from fritzlog.api_model import (
    Permission,
    PermissionKind,
    PermissionLevel,
    SessionInfo,
)
from fritzlog.exceptions import ApiError


def test_parse_should_read_all_fields():
    body = (
        "<SessionInfo><SID>0000000000000000</SID><Challenge>5f2e4a1b</Challenge>"
        "<BlockTime>12</BlockTime><Rights>"
        "<Name>NAS</Name><Access>2</Access>"
        "<Name>HomeAuto</Name><Access>1</Access>"
        "</Rights></SessionInfo>"
    )

    session = SessionInfo.parse(body)

    assert session.sid == "0000000000000000"
    assert session.is_authenticated is False
    assert session.challenge == "5f2e4a1b"
    assert session.block_time == 12
    assert session.permissions == [
        Permission(PermissionKind.NAS, PermissionLevel.READ_WRITE),
        Permission(PermissionKind.HOME_AUTO, PermissionLevel.READ),
    ]
    assert session.has_permission(PermissionKind.HOME_AUTO)


def test_parse_should_drop_unknown_permission_pairs():
    body = (
        "<SessionInfo><SID>abcdef0123456789</SID><Challenge>c</Challenge>"
        "<BlockTime>0</BlockTime><Rights>"
        "<Name>Dial</Name><Access>2</Access>"
        "<Name>App</Name><Access>7</Access>"
        "<Name>Phone</Name><Access>1</Access>"
        "<Name>BoxAdmin</Name>"
        "</Rights></SessionInfo>"
    )

    session = SessionInfo.parse(body)

    assert session.is_authenticated is True
    assert session.permissions == [
        Permission(PermissionKind.PHONE, PermissionLevel.READ)
    ]
    assert not session.has_permission(PermissionKind.HOME_AUTO)


def test_parse_should_raise_on_missing_element():
    body = "<SessionInfo><SID>0000000000000000</SID><BlockTime>0</BlockTime></SessionInfo>"

    with pytest.raises(ApiError, match="Did not find child"):
        SessionInfo.parse(body)


def test_parse_should_raise_on_bad_block_time():
    body = (
        "<SessionInfo><SID>0000000000000000</SID><Challenge>c</Challenge>"
        "<BlockTime>soon</BlockTime><Rights/></SessionInfo>"
    )

    with pytest.raises(ApiError, match="block_time"):
        SessionInfo.parse(body)
