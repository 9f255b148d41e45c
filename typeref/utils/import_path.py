import logging
import posixpath
import re
from typing import Optional, Union

from typeref.base.descriptor import Descriptor, Resolution, Unresolved

logger = logging.getLogger(__name__)

IMPORT_MARKER = "import("
DEPENDENCY_DIR = "node_modules"
TYPES_DIR = "@types"
INDEX_SEGMENT = "index"

# import("<path>") exactly as the checker renders it
IMPORT_PATTERN = re.compile(r'\bimport\("([^"]+)"\)')


def _to_posix(path: str) -> str:
    return path.replace("\\", "/")


def relative_import_path(import_path: str, file_name: str) -> Optional[str]:
    relative_path = posixpath.relpath(_to_posix(import_path), posixpath.dirname(_to_posix(file_name)))
    if not relative_path.startswith("."):
        relative_path = "./" + relative_path

    segments = relative_path.split("/")
    if DEPENDENCY_DIR in segments:
        # nested packages stay under their owner's node_modules
        segments = segments[segments.index(DEPENDENCY_DIR) + 1:]
        if segments and segments[0] == TYPES_DIR:
            segments = segments[1:]
        if not segments:
            return None

    if len(segments) > 1 and segments[-1] == INDEX_SEGMENT:
        segments = segments[:-1]
    return "/".join(segments)


def replace_import_path(type_reference: Union[str, Descriptor], file_name: str) -> Resolution:
    """
    Rewrite ``import("/abs/path").Name`` inside a rendered type into
    ``require("<path relative to file_name>").Name``.
    """
    text = type_reference.text if isinstance(type_reference, Descriptor) else type_reference
    if IMPORT_MARKER not in text:
        return Descriptor(text)

    import_paths = IMPORT_PATTERN.findall(text)
    if not import_paths:
        logger.debug("No import specifier found in %r", text)
        return Unresolved("unrecognised import specifier")

    relative_paths = {p: relative_import_path(p, file_name) for p in import_paths}
    if None in relative_paths.values():
        logger.debug("Import specifier in %r names no module", text)
        return Unresolved("import specifier without module path")

    def rewrite(match):
        return f'require("{relative_paths[match.group(1)]}")'

    return Descriptor(IMPORT_PATTERN.sub(rewrite, text))
