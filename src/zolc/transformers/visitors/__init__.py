"""Check passes, in the order the pipeline runs them."""

from .accessed import AccessedVisitor
from .decorator import DecoratorVisitor
from .external_call import ExternalCallVisitor
from .incremented import IncrementedVisitor
from .unsupported import UnsupportedVisitor
from .whole import WholeVisitor

__all__ = [
    "AccessedVisitor",
    "DecoratorVisitor",
    "ExternalCallVisitor",
    "IncrementedVisitor",
    "UnsupportedVisitor",
    "WholeVisitor",
]
