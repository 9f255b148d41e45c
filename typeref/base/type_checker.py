import re
from abc import ABC, abstractmethod
from enum import IntFlag
from typing import Any, List, Optional


class SymbolFlags(IntFlag):
    NONE = 0
    VARIABLE = 1 << 0
    PROPERTY = 1 << 1
    ENUM_MEMBER = 1 << 2
    FUNCTION = 1 << 3
    CLASS = 1 << 4
    INTERFACE = 1 << 5
    ENUM = 1 << 6
    TYPE_LITERAL = 1 << 7
    TYPE_ALIAS = 1 << 8
    ALIAS = 1 << 9

    @classmethod
    def from_names(cls, names) -> "SymbolFlags":
        flags = cls.NONE
        for name in names or []:
            # accept both "EnumMember" and "ENUM_MEMBER"
            if name != name.upper():
                name = re.sub(r"(?<!^)(?=[A-Z])", "_", name)
            flags |= cls[name.upper()]
        return flags


class TypeRenderError(Exception):
    """Raised when the checker cannot render a type to text."""


class TypeChecker(ABC):
    """
    Read-only view of a type-checking service.

    Type and symbol handles are opaque to the resolver: they are only
    handed back to the methods below.
    """

    @abstractmethod
    def is_array(self, type_: Any) -> bool:
        pass

    @abstractmethod
    def is_boolean(self, type_: Any) -> bool:
        pass

    @abstractmethod
    def is_number(self, type_: Any) -> bool:
        pass

    @abstractmethod
    def is_string(self, type_: Any) -> bool:
        pass

    @abstractmethod
    def is_class(self, type_: Any) -> bool:
        pass

    @abstractmethod
    def is_interface(self, type_: Any) -> bool:
        pass

    @abstractmethod
    def is_enum(self, type_: Any) -> bool:
        pass

    @abstractmethod
    def is_union_or_intersection(self, type_: Any) -> bool:
        pass

    @abstractmethod
    def is_undefined(self, type_: Any) -> bool:
        pass

    @abstractmethod
    def get_type_arguments(self, type_: Any) -> List[Any]:
        pass

    @abstractmethod
    def get_union_types(self, type_: Any) -> List[Any]:
        pass

    @abstractmethod
    def get_text(self, type_: Any, enclosing_node: Any = None) -> str:
        """Render ``type_`` as text, raising ``TypeRenderError`` on failure."""

    @abstractmethod
    def get_symbol(self, type_: Any) -> Optional[Any]:
        pass

    @abstractmethod
    def get_alias_symbol(self, type_: Any) -> Optional[Any]:
        pass

    @abstractmethod
    def get_symbol_flags(self, symbol: Any) -> SymbolFlags:
        pass

    @abstractmethod
    def get_symbol_parent(self, symbol: Any) -> Optional[Any]:
        pass

    @abstractmethod
    def get_declared_type_of_symbol(self, symbol: Any) -> Any:
        pass
