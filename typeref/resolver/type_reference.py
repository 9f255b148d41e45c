import logging
from typing import Any, Dict, Optional

from typeref.base.descriptor import (
    BOOLEAN,
    DATE,
    NUMBER,
    OBJECT,
    STRING,
    UNRESOLVED,
    Descriptor,
    Resolution,
    Unresolved,
)
from typeref.base.type_checker import TypeChecker, TypeRenderError
from typeref.resolver.desugar import (
    get_auto_generated_enum_union,
    is_auto_generated_type_union,
    last_real_member,
)

logger = logging.getLogger(__name__)

WRAPPER_MARKERS = ("Promise", "Observable")
TOP_TYPES = {"any", "unknown", "object"}


def is_promise_or_observable(text: str) -> bool:
    return any(marker in text for marker in WRAPPER_MARKERS)


def render_type(type_, checker: TypeChecker, enclosing_node=None) -> Resolution:
    try:
        return Descriptor(checker.get_text(type_, enclosing_node))
    except TypeRenderError as e:
        logger.debug("Unable to render type %r: %s", type_, e)
        return Unresolved(f"render failed: {e}")


def extract_type_argument_if_array(type_, checker: TypeChecker) -> Optional[Dict[str, Any]]:
    if checker.is_array(type_):
        arguments = checker.get_type_arguments(type_)
        if not arguments:
            return None
        return {"type": arguments[0], "is_array": True}
    return {"type": type_, "is_array": False}


def resolve_type_reference(type_, checker: TypeChecker, max_depth: Optional[int] = None) -> Resolution:
    """
    Resolve a checker type to the descriptor used in generated metadata.

    The result is one of ``Boolean``, ``Number``, ``String``, ``Date``,
    ``Object``, a class name, ``[<descriptor>]`` for arrays, or ``Unresolved``
    when the type falls outside that vocabulary (enums included).
    """
    return _resolve(type_, checker, 0, max_depth)


def _resolve(type_, checker: TypeChecker, depth: int, max_depth: Optional[int]) -> Resolution:
    if max_depth is not None and depth > max_depth:
        logger.debug("Type nesting deeper than %d, giving up", max_depth)
        return Unresolved("max depth exceeded")

    if checker.is_array(type_):
        arguments = checker.get_type_arguments(type_)
        if not arguments:
            return Unresolved("array without element type")
        element = _resolve(arguments[0], checker, depth + 1, max_depth)
        if not element:
            return element
        return Descriptor.array_of(element)

    if checker.is_boolean(type_):
        return BOOLEAN
    if checker.is_number(type_):
        return NUMBER
    if checker.is_string(type_):
        return STRING

    rendered = render_type(type_, checker)
    if not rendered:
        return rendered
    text = rendered.text

    if is_promise_or_observable(text):
        arguments = checker.get_type_arguments(type_)
        if not arguments:
            return Unresolved(f"{text} without type argument")
        return _resolve(arguments[0], checker, depth + 1, max_depth)

    if checker.is_class(type_):
        return rendered

    if text == DATE.text:
        return DATE

    if is_auto_generated_type_union(type_, checker):
        return _resolve(last_real_member(type_, checker), checker, depth + 1, max_depth)
    enum_type = get_auto_generated_enum_union(type_, checker)
    if enum_type is not None:
        return _resolve(enum_type, checker, depth + 1, max_depth)

    if (
        text in TOP_TYPES
        or checker.is_interface(type_)
        or (checker.is_union_or_intersection(type_) and not checker.is_enum(type_))
    ):
        return OBJECT

    if checker.is_enum(type_):
        logger.debug("Leaving enum type %s unresolved", text)
        return Unresolved("enum")

    if checker.get_alias_symbol(type_) is not None:
        return OBJECT

    return UNRESOLVED
