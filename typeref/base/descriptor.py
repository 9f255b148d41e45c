from dataclasses import dataclass, field
from typing import Union


@dataclass(frozen=True)
class Descriptor:
    """A resolved type descriptor, e.g. ``String``, ``[Number]`` or ``User``."""

    text: str

    @classmethod
    def array_of(cls, element: "Descriptor") -> "Descriptor":
        return cls(f"[{element.text}]")

    @property
    def is_array(self) -> bool:
        return self.text.startswith("[") and self.text.endswith("]")

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Unresolved:
    """No descriptor is available; the caller should omit the metadata."""

    reason: str = field(default="", compare=False)

    def __bool__(self) -> bool:
        return False

    def __str__(self) -> str:
        return "<unresolved>"


Resolution = Union[Descriptor, Unresolved]

UNRESOLVED = Unresolved()

BOOLEAN = Descriptor("Boolean")
NUMBER = Descriptor("Number")
STRING = Descriptor("String")
DATE = Descriptor("Date")
OBJECT = Descriptor("Object")


def is_resolved(result: Resolution) -> bool:
    return isinstance(result, Descriptor)
