from typing import Any, Optional

from typeref.base.type_checker import SymbolFlags, TypeChecker


def _union_types(type_, checker: TypeChecker):
    if not checker.is_union_or_intersection(type_) or checker.is_enum(type_):
        return None
    return checker.get_union_types(type_) or None


def _undefined_index(types, checker: TypeChecker) -> int:
    return next((i for i, t in enumerate(types) if checker.is_undefined(t)), -1)


def is_auto_generated_type_union(type_, checker: TypeChecker) -> bool:
    """
    With strict null checks the checker rewrites an optional property's
    type ``T`` into ``undefined | T``. True when ``type_`` has exactly that shape.
    """
    types = _union_types(type_, checker)
    if not types:
        return False
    return len(types) == 2 and _undefined_index(types, checker) >= 0


def get_auto_generated_enum_union(type_, checker: TypeChecker) -> Optional[Any]:
    """
    With strict null checks an optional enum property becomes a union of the
    enum's member types plus ``undefined``. Returns the declared enum type
    when every non-undefined member belongs to the same enum, else None.
    """
    types = _union_types(type_, checker)
    if not types:
        return None
    undefined_index = _undefined_index(types, checker)
    if undefined_index < 0:
        return None

    parent_type = None
    for index, item in enumerate(types):
        if index == undefined_index:
            continue
        symbol = checker.get_symbol(item)
        if symbol is None:
            return None
        parent = checker.get_symbol_parent(symbol)
        if parent is None or checker.get_symbol_flags(symbol) != SymbolFlags.ENUM_MEMBER:
            return None
        symbol_type = checker.get_declared_type_of_symbol(parent)
        if parent_type is not None and symbol_type != parent_type:
            return None
        parent_type = symbol_type
    return parent_type


def last_real_member(type_, checker: TypeChecker) -> Optional[Any]:
    # the member the desugaring wrapped, i.e. the last one that is not undefined
    types = checker.get_union_types(type_) or []
    for item in reversed(types):
        if not checker.is_undefined(item):
            return item
    return None
