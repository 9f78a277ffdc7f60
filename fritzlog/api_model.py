"""Gateway login payloads."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from enum import Enum

from .const import NO_SESSION
from .xmlutil import get_child, get_child_text, get_int, parse_document


class PermissionKind(Enum):
    BOX_ADMIN = "BoxAdmin"
    HOME_AUTO = "HomeAuto"
    NAS = "NAS"
    APP = "App"
    PHONE = "Phone"


class PermissionLevel(Enum):
    READ = "1"
    READ_WRITE = "2"


@dataclass(frozen=True)
class Permission:
    kind: PermissionKind
    level: PermissionLevel

    @classmethod
    def parse(cls, kind: ET.Element, level: ET.Element | None) -> Permission | None:
        """Build a permission from a name/access element pair, None if unknown."""
        if level is None:
            return None
        try:
            return cls(
                kind=PermissionKind((kind.text or "").strip()),
                level=PermissionLevel((level.text or "").strip()),
            )
        except ValueError:
            return None


@dataclass
class SessionInfo:
    """Result of one login_sid.lua request."""

    sid: str
    challenge: str
    block_time: int
    permissions: list[Permission] = field(default_factory=list)

    @property
    def is_authenticated(self) -> bool:
        return self.sid != NO_SESSION

    def has_permission(self, kind: PermissionKind) -> bool:
        return any(permission.kind == kind for permission in self.permissions)

    @classmethod
    def parse(cls, body: str) -> SessionInfo:
        root = parse_document(body, "session")
        if root.tag == "SessionInfo":
            info = root
        else:
            info = get_child(root, "SessionInfo")

        # Rights holds <Name>/<Access> pairs in document order
        rights = list(get_child(info, "Rights"))
        permissions = []
        for index in range(0, len(rights), 2):
            level = rights[index + 1] if index + 1 < len(rights) else None
            permission = Permission.parse(rights[index], level)
            if permission is not None:
                permissions.append(permission)

        return cls(
            sid=get_child_text(info, "SID"),
            challenge=get_child_text(info, "Challenge"),
            block_time=get_int(get_child_text(info, "BlockTime"), "block_time"),
            permissions=permissions,
        )
