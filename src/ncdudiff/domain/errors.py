from __future__ import annotations

"""
Domain Error Hierarchy.

Every fatal condition raised by the diff engine derives from NcduDiffError so
that interface layers can map failures to exit codes in one place. Schema
mismatches are warnings: they are collected on the parsed snapshot and logged,
never raised.
"""


class NcduDiffError(Exception):
    """Base class for all fatal diff engine failures."""


class MalformedSnapshotError(NcduDiffError):
    """The dump cannot be interpreted as an ncdu export at all."""


class DuplicateIdentityError(NcduDiffError):
    """A pre-order id or a composite diff identity collided."""

    def __init__(self, identity: object) -> None:
        super().__init__(f"identity {identity} already exists")
        self.identity = identity


class PathNotFoundError(NcduDiffError):
    """
    A path lookup failed to find a named segment.

    Callers only request paths whose ancestors are already resolved, so this
    signals an internal consistency defect rather than a user error.
    """

    def __init__(self, path: object, segment: str) -> None:
        super().__init__(f"segment '{segment}' of path {path} not found")
        self.path = path
        self.segment = segment


class InvariantViolation(NcduDiffError):
    """A value that must be present was absent."""


class SchemaWarning(UserWarning):
    """The dump version or shape differs from the expected scanner format."""
