"""Exception hierarchy for layout operations.

Every public layout operation is all-or-nothing: when one of these is
raised, the layout is exactly as it was before the call.  ``to_dict``
gives the web layer a serializable payload.
"""

from __future__ import annotations

from typing import Any


class LayoutError(Exception):
    """Base exception for all layout engine errors."""

    code: str = "LAYOUT_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class UnknownModule(LayoutError):
    """Catalog lookup miss — a caller or configuration bug."""

    code = "UNKNOWN_MODULE"

    def __init__(self, module_id: str) -> None:
        super().__init__(f"Unknown module '{module_id}'", module_id=module_id)


class UnknownUnit(LayoutError):
    code = "UNKNOWN_UNIT"

    def __init__(self, uid: str) -> None:
        super().__init__(f"No unit with uid '{uid}'", uid=uid)


class UnknownExtra(LayoutError):
    code = "UNKNOWN_EXTRA"

    def __init__(self, module_id: str, extra_id: str) -> None:
        super().__init__(
            f"Module '{module_id}' has no extra '{extra_id}'",
            module_id=module_id, extra_id=extra_id,
        )


class NoCompatibleConnector(LayoutError):
    """No rotation × connector pairing satisfies the pairing table."""

    code = "NO_COMPATIBLE_CONNECTOR"

    def __init__(self, module_id: str, target_uid: str, connector_id: str) -> None:
        super().__init__(
            f"No connector of '{module_id}' can join "
            f"'{target_uid}:{connector_id}'",
            module_id=module_id, target_uid=target_uid, connector_id=connector_id,
        )


class Overlap(LayoutError):
    code = "OVERLAP"

    def __init__(self, module_id: str, colliding: list[str]) -> None:
        super().__init__(
            f"'{module_id}' would overlap {', '.join(colliding) or 'another unit'}",
            module_id=module_id, colliding=list(colliding),
        )


class RotationLocked(LayoutError):
    code = "ROTATION_LOCKED"

    def __init__(self, uid: str, connection_count: int) -> None:
        super().__init__(
            f"Rotation locked: '{uid}' has {connection_count} connections",
            uid=uid, connection_count=connection_count,
        )


class LastUnit(LayoutError):
    code = "LAST_UNIT"

    def __init__(self, uid: str) -> None:
        super().__init__("Cannot delete the last unit", uid=uid)


class ConnectorInUse(LayoutError):
    code = "CONNECTOR_IN_USE"

    def __init__(self, uid: str, connector_id: str) -> None:
        super().__init__(
            f"Connector '{uid}:{connector_id}' is already used",
            uid=uid, connector_id=connector_id,
        )


__all__ = [
    "LayoutError",
    "UnknownModule",
    "UnknownUnit",
    "UnknownExtra",
    "NoCompatibleConnector",
    "Overlap",
    "RotationLocked",
    "LastUnit",
    "ConnectorInUse",
]
