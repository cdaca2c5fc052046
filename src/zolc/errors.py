"""Error taxonomy for the zolc core.

Every failure aborts the running pass and the whole pipeline. Errors carry an
optional location string built from the Path ancestry, e.g.
``nodes[2].body.statements[0]``.
"""

from __future__ import annotations


class ZolcError(Exception):
    """Base for all errors raised by the core."""

    def __init__(self, msg: str, location: str | None = None):
        self.msg: str = msg
        self.location: str | None = location
        if location is None:
            super().__init__(msg)
        else:
            super().__init__(msg + " at " + location)


class StructuralIntegrityError(ZolcError):
    """A Path's container/key/node triple is inconsistent."""


class UnsupportedConstructError(ZolcError):
    """The input uses a feature the compiler does not model."""


class SecrecyLeakError(ZolcError):
    """A secret value reaches a context where it must not appear."""


class ClassificationError(ZolcError):
    """A state variable's usages cannot be reconciled into one decision."""


class ResolutionError(ZolcError):
    """A reference does not resolve to any binding."""
