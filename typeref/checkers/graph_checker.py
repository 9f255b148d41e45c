import json
import pickle
from itertools import count
from typing import List, Optional

import networkx as nx

from typeref.base.type_checker import SymbolFlags, TypeChecker, TypeRenderError

TYPE_KINDS = {
    "array", "boolean", "number", "string", "class", "interface", "enum",
    "enum_literal", "union", "intersection", "undefined", "any", "unknown",
    "object", "literal", "reference",
}
ORDERED_RELATIONS = ("type_argument", "member")
SINGLE_RELATIONS = ("symbol", "alias_symbol", "parent", "declared_type")


class TypeGraphError(Exception):
    pass


def build_type_graph_from_schema(schema) -> nx.MultiDiGraph:
    G = nx.MultiDiGraph()

    for node in schema.get("nodes", []):
        nid = node["id"]
        attrs = {k: v for k, v in node.items() if k != "id" and v is not None}
        category = attrs.setdefault("category", "type")
        if category == "type" and attrs.get("kind") not in TYPE_KINDS:
            raise TypeGraphError(f"Unknown type kind {attrs.get('kind')!r} for node {nid}")
        if category == "symbol" and isinstance(attrs.get("flags"), list):
            attrs["flags"] = ",".join(attrs["flags"])
        G.add_node(nid, **attrs)

    for edge in schema.get("edges", []):
        src = edge["from"]
        dst = edge["to"]
        if src not in G or dst not in G:
            raise TypeGraphError(f"Edge {src} -> {dst} references an unknown node")
        rel = edge.get("relation") or ""
        if rel not in ORDERED_RELATIONS + SINGLE_RELATIONS:
            raise TypeGraphError(f"Unknown relation {rel!r} on edge {src} -> {dst}")
        G.add_edge(src, dst, relation=rel, index=edge.get("index", 0))

    return G


def load_type_graph(graph_path: str) -> nx.MultiDiGraph:
    if graph_path.endswith(".json"):
        with open(graph_path, "r", encoding="utf-8") as f:
            return build_type_graph_from_schema(json.load(f))
    elif graph_path.endswith(".gpickle"):
        with open(graph_path, "rb") as f:
            return pickle.load(f)
    elif graph_path.endswith(".graphml"):
        return nx.read_graphml(graph_path, force_multigraph=True)
    else:
        raise TypeGraphError(f"Unsupported graph format: {graph_path}")


class GraphTypeChecker(TypeChecker):
    """TypeChecker over a type graph dumped from the host compiler."""

    def __init__(self, graph: nx.MultiDiGraph):
        self.graph = graph

    @classmethod
    def from_file(cls, graph_path: str) -> "GraphTypeChecker":
        return cls(load_type_graph(graph_path))

    def _attrs(self, nid):
        if nid not in self.graph:
            raise TypeGraphError(f"Unknown node: {nid}")
        return self.graph.nodes[nid]

    def _kind(self, type_id) -> str:
        return self._attrs(type_id).get("kind", "")

    def _targets(self, nid, relation) -> List:
        self._attrs(nid)
        edges = [
            (data.get("index", 0), dst)
            for _, dst, data in self.graph.out_edges(nid, data=True)
            if data.get("relation") == relation
        ]
        return [dst for _, dst in sorted(edges, key=lambda e: int(e[0]))]

    def _target(self, nid, relation) -> Optional[str]:
        targets = self._targets(nid, relation)
        return targets[0] if targets else None

    def is_array(self, type_id) -> bool:
        return self._kind(type_id) == "array"

    def is_boolean(self, type_id) -> bool:
        return self._kind(type_id) == "boolean"

    def is_number(self, type_id) -> bool:
        return self._kind(type_id) == "number"

    def is_string(self, type_id) -> bool:
        return self._kind(type_id) == "string"

    def is_class(self, type_id) -> bool:
        return self._kind(type_id) == "class"

    def is_interface(self, type_id) -> bool:
        return self._kind(type_id) == "interface"

    def is_enum(self, type_id) -> bool:
        return self._kind(type_id) in ("enum", "enum_literal")

    def is_union_or_intersection(self, type_id) -> bool:
        # enums whose members are all literals are unions too
        if self._kind(type_id) in ("union", "intersection"):
            return True
        return self._kind(type_id) == "enum" and bool(self._targets(type_id, "member"))

    def is_undefined(self, type_id) -> bool:
        return self._kind(type_id) == "undefined"

    def get_type_arguments(self, type_id) -> List:
        return self._targets(type_id, "type_argument")

    def get_union_types(self, type_id) -> List:
        return self._targets(type_id, "member")

    def get_text(self, type_id, enclosing_node=None) -> str:
        text = self._attrs(type_id).get("text")
        if text is None or text == "":
            raise TypeRenderError(f"Type {type_id} has no textual representation")
        return text

    def get_symbol(self, type_id):
        return self._target(type_id, "symbol")

    def get_alias_symbol(self, type_id):
        return self._target(type_id, "alias_symbol")

    def get_symbol_flags(self, symbol_id) -> SymbolFlags:
        flags = self._attrs(symbol_id).get("flags", "")
        if isinstance(flags, str):
            flags = [f.strip() for f in flags.split(",") if f.strip()]
        return SymbolFlags.from_names(flags)

    def get_symbol_parent(self, symbol_id):
        return self._target(symbol_id, "parent")

    def get_declared_type_of_symbol(self, symbol_id):
        declared = self._target(symbol_id, "declared_type")
        if declared is None:
            raise TypeGraphError(f"Symbol {symbol_id} has no declared type")
        return declared


class TypeGraphBuilder:
    """Incrementally builds a type graph schema."""

    def __init__(self):
        self.nodes = []
        self.edges = []
        self._ids = count(1)

    def _next_id(self, prefix):
        return f"{prefix}{next(self._ids)}"

    def add_type(self, kind, text=None, type_arguments=(), members=(), symbol=None, alias_symbol=None, node_id=None):
        nid = node_id or self._next_id("t")
        self.nodes.append({"id": nid, "category": "type", "kind": kind, "text": text})
        for index, arg in enumerate(type_arguments):
            self.edges.append({"from": nid, "to": arg, "relation": "type_argument", "index": index})
        for index, member in enumerate(members):
            self.edges.append({"from": nid, "to": member, "relation": "member", "index": index})
        if symbol is not None:
            self.edges.append({"from": nid, "to": symbol, "relation": "symbol"})
        if alias_symbol is not None:
            self.edges.append({"from": nid, "to": alias_symbol, "relation": "alias_symbol"})
        return nid

    def add_symbol(self, name, flags=(), parent=None, declared_type=None, node_id=None):
        nid = node_id or self._next_id("s")
        self.nodes.append({"id": nid, "category": "symbol", "name": name, "flags": list(flags)})
        if parent is not None:
            self.edges.append({"from": nid, "to": parent, "relation": "parent"})
        if declared_type is not None:
            self.edges.append({"from": nid, "to": declared_type, "relation": "declared_type"})
        return nid

    def declare(self, symbol, type_id):
        self.edges.append({"from": symbol, "to": type_id, "relation": "declared_type"})

    def to_schema(self):
        return {"nodes": list(self.nodes), "edges": list(self.edges)}

    def build(self) -> GraphTypeChecker:
        return GraphTypeChecker(build_type_graph_from_schema(self.to_schema()))
