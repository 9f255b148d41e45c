import json
import logging
from typing import Iterable, List, Optional

import chardet
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from typeref.utils.decorators import Decorator, PropertyAssignment, find_decorator_by_names

logger = logging.getLogger(__name__)

CLASS_NODES = ("class_declaration", "class", "abstract_class_declaration")
FIELD_NODES = ("public_field_definition",)
QUOTES = "'\"`"


def read_source(file_path: str) -> str:
    with open(file_path, "rb") as f:
        raw = f.read()
    guess = chardet.detect(raw)
    encoding = guess["encoding"] or "utf-8"
    return raw.decode(encoding, errors="replace")


class DecoratedPropertyExtractor:
    """Collects class properties and their decorators from TypeScript sources."""

    def __init__(self, decorator_names: Optional[Iterable[str]] = None):
        self.language = Language(tree_sitter_typescript.language_typescript())
        self.parser = Parser(self.language)
        self.decorator_names = set(decorator_names) if decorator_names is not None else None
        self.all_components = []

    def get_text(self, node: Node, code: bytes) -> str:
        return code[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def get_decorator_name(self, node: Node, code: bytes) -> Optional[str]:
        expr = node.named_children[0] if node.named_children else None
        if expr is not None and expr.type == "call_expression":
            expr = expr.child_by_field_name("function")
        if expr is not None and expr.type == "member_expression":
            expr = expr.child_by_field_name("property")
        if expr is None or expr.type not in ("identifier", "property_identifier"):
            return None
        return self.get_text(expr, code)

    def extract_object_properties(self, node: Node, code: bytes) -> List[PropertyAssignment]:
        properties = []
        for c in node.named_children:
            if c.type == "pair":
                key = c.child_by_field_name("key")
                value = c.child_by_field_name("value")
                properties.append(PropertyAssignment(
                    name=self.get_text(key, code).strip(QUOTES),
                    value=self.get_text(value, code) if value is not None else "",
                    node=c,
                ))
            elif c.type == "shorthand_property_identifier":
                name = self.get_text(c, code)
                properties.append(PropertyAssignment(name=name, value=name, node=c))
        return properties

    def extract_decorator(self, node: Node, code: bytes) -> Decorator:
        arguments, properties = [], []
        expr = node.named_children[0] if node.named_children else None
        if expr is not None and expr.type == "call_expression":
            args = expr.child_by_field_name("arguments")
            if args is not None:
                arguments = [self.get_text(a, code) for a in args.named_children if a.type != "comment"]
                first = next((a for a in args.named_children if a.type != "comment"), None)
                if first is not None and first.type == "object":
                    properties = self.extract_object_properties(first, code)
        return Decorator(
            name=self.get_decorator_name(node, code),
            text=self.get_text(node, code),
            arguments=arguments,
            properties=properties,
            node=node,
        )

    def extract_field(self, node: Node, code: bytes, class_name, pending_decorators):
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return None
        type_node = node.child_by_field_name("type")
        type_annotation = None
        if type_node is not None:
            type_annotation = self.get_text(type_node, code).lstrip(":").strip()
        decorators = list(pending_decorators)
        decorators.extend(self.extract_decorator(c, code) for c in node.children if c.type == "decorator")
        return {
            "kind": "property",
            "name": self.get_text(name_node, code),
            "class": class_name,
            "optional": any(c.type == "?" for c in node.children),
            "type_annotation": type_annotation,
            "decorators": decorators,
            "start_line": node.start_point[0] + 1,
            "end_line": node.end_point[0] + 1,
        }

    def extract_properties(self, node: Node, code: bytes, class_name=None) -> List[dict]:
        results = []
        if node.type in CLASS_NODES and node.is_named:
            name_node = node.child_by_field_name("name")
            class_name = self.get_text(name_node, code) if name_node is not None else None
            body = node.child_by_field_name("body")
            pending = []
            for m in (body.children if body is not None else []):
                if m.type == "decorator":
                    pending.append(self.extract_decorator(m, code))
                elif m.type in FIELD_NODES:
                    field = self.extract_field(m, code, class_name, pending)
                    pending = []
                    if field is not None:
                        results.append(field)
                elif m.type not in (";", ",", "comment"):
                    pending = []
                # nested classes, e.g. in field initializers
                results.extend(self._nested_properties(m, code))
            return results

        for c in node.children:
            results.extend(self.extract_properties(c, code, class_name))
        return results

    def _nested_properties(self, node: Node, code: bytes) -> List[dict]:
        results = []
        for c in node.children:
            results.extend(self.extract_properties(c, code))
        return results

    def keep(self, component) -> bool:
        if self.decorator_names is None:
            return True
        return find_decorator_by_names(self.decorator_names, component["decorators"]) is not None

    def scan_source(self, code: str, file_path: str = "<source>") -> List[dict]:
        code_bytes = code.encode("utf-8")
        tree = self.parser.parse(code_bytes)
        components = [c for c in self.extract_properties(tree.root_node, code_bytes) if self.keep(c)]
        for comp in components:
            comp["file_path"] = file_path.replace("\\", "/")
        logger.debug("Found %d decorated properties in %s", len(components), file_path)
        return components

    def process_file(self, file_path: str) -> List[dict]:
        components = self.scan_source(read_source(file_path), file_path)
        self.all_components.extend(components)
        return components

    def extract_all_components(self):
        return self.all_components

    def to_serializable(self, components=None):
        serializable = []
        for comp in self.all_components if components is None else components:
            out = dict(comp)
            out["decorators"] = [d.to_dict() for d in comp["decorators"]]
            serializable.append(out)
        return serializable

    def write_to_file(self, output_path: str):
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(self.to_serializable(), f, indent=2, ensure_ascii=False)
