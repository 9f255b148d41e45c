from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence


@dataclass
class PropertyAssignment:
    name: str
    value: str = ""
    synthetic: bool = False
    node: Any = field(default=None, repr=False, compare=False)

    @classmethod
    def synthesized(cls, name: str, value: str) -> "PropertyAssignment":
        return cls(name=name, value=value, synthetic=True)

    def to_dict(self):
        return {"name": self.name, "value": self.value, "synthetic": self.synthetic}


@dataclass
class Decorator:
    name: Optional[str]
    text: str = ""
    arguments: List[str] = field(default_factory=list)
    properties: List[PropertyAssignment] = field(default_factory=list)
    node: Any = field(default=None, repr=False, compare=False)

    def to_dict(self):
        return {
            "name": self.name,
            "text": self.text,
            "arguments": self.arguments,
            "properties": [p.to_dict() for p in self.properties],
        }


def find_decorator_by_names(names: Iterable[str], decorators: Optional[Sequence[Decorator]]) -> Optional[Decorator]:
    names = set(names or ())
    for decorator in decorators or ():
        if decorator.name in names:
            return decorator
    return None


def has_property_key(key: str, properties: Optional[Sequence[PropertyAssignment]]) -> bool:
    # entries injected by the generator must not count as existing keys
    return any(p.name == key for p in properties or () if not p.synthetic)
