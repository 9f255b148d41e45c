import argparse
import logging
import os
import sys
import traceback
from pathlib import Path

import pathspec

from typeref.base.descriptor import is_resolved
from typeref.checkers.graph_checker import GraphTypeChecker
from typeref.extractors.property_extractor import DecoratedPropertyExtractor
from typeref.resolver.type_reference import resolve_type_reference
from typeref.utils.import_path import replace_import_path

logger = logging.getLogger(__name__)

TS_EXTS = (".ts", ".tsx")
DEFAULT_DECORATORS = ("ApiProperty", "ApiPropertyOptional", "Field")
MAX_DEPTH_ENV = "TYPEREF_MAX_DEPTH"


def default_max_depth():
    value = os.environ.get(MAX_DEPTH_ENV)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"${MAX_DEPTH_ENV} must be an integer, got {value!r}")


def resolve(graph_path, type_id, file_name=None, max_depth=None):
    checker = GraphTypeChecker.from_file(graph_path)
    result = resolve_type_reference(type_id, checker, max_depth=max_depth)
    if is_resolved(result) and file_name:
        result = replace_import_path(result, file_name)
    return result


def collect_source_files(root_dir):
    root_dir = Path(root_dir)
    if root_dir.is_file():
        return [root_dir]
    gitignore_pth = root_dir / ".gitignore"
    gitign_pattern = gitignore_pth.read_text().splitlines() if gitignore_pth.exists() else []
    spec = pathspec.PathSpec.from_lines("gitwildmatch", gitign_pattern)

    files = []
    for file_path in sorted(root_dir.rglob("*")):
        if "node_modules" in file_path.parts or file_path.name.endswith(".d.ts"):
            continue
        if file_path.suffix in TS_EXTS and not spec.match_file(str(file_path.relative_to(root_dir))):
            files.append(file_path)
    return files


def scan(root_dir, decorator_names=DEFAULT_DECORATORS, output_path=None):
    extractor = DecoratedPropertyExtractor(decorator_names)
    for code_path in collect_source_files(root_dir):
        try:
            extractor.process_file(str(code_path))
        except Exception:
            print(traceback.format_exc())
            print(f"Unable to process - {code_path}. Skipping it.")

    if output_path:
        os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)
        extractor.write_to_file(output_path)
    return extractor.to_serializable()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Type reference resolution tool")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="function", help="Available functions")

    parser_resolve = subparsers.add_parser("resolve", help="Resolve a type from a type graph to a descriptor")
    parser_resolve.add_argument("graph", help="Type graph (.json, .graphml or .gpickle)")
    parser_resolve.add_argument("type_id", help="Id of the type node to resolve")
    parser_resolve.add_argument("--file", default=None,
                                help="Emitting file; rewrites import() references relative to it")
    parser_resolve.add_argument("--max-depth", type=int, default=None,
                                help=f"Recursion guard (default: ${MAX_DEPTH_ENV} or unbounded)")

    parser_normalize = subparsers.add_parser("normalize", help="Rewrite import() references in a type text")
    parser_normalize.add_argument("text", help="Rendered type text")
    parser_normalize.add_argument("file", help="Emitting file path")

    parser_scan = subparsers.add_parser("scan", help="List decorated class properties in TypeScript sources")
    parser_scan.add_argument("root_dir", help="TypeScript file or directory to scan")
    parser_scan.add_argument("--decorators", default=",".join(DEFAULT_DECORATORS),
                             help="Comma separated decorator names (default: %(default)s)")
    parser_scan.add_argument("--output", default=None, help="Write the properties as JSON to this path")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.function:
        parser.print_help()
        return

    try:
        if args.function == "resolve":
            max_depth = args.max_depth if args.max_depth is not None else default_max_depth()
            print(resolve(args.graph, args.type_id, file_name=args.file, max_depth=max_depth))

        elif args.function == "normalize":
            print(replace_import_path(args.text, args.file))

        elif args.function == "scan":
            names = [n.strip() for n in args.decorators.split(",") if n.strip()]
            components = scan(args.root_dir, names, output_path=args.output)
            if args.output:
                print(f"Wrote {len(components)} properties to {args.output}")
            else:
                for comp in components:
                    decorators = ", ".join(d["name"] or "?" for d in comp["decorators"])
                    print(f"{comp['file_path']}:{comp['start_line']} {comp['class']}.{comp['name']} [{decorators}]")

    except Exception as e:
        logger.debug(traceback.format_exc())
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
