"""Build descriptor (*.csproj) discovery and editing.

Descriptors are edited as parsed element trees: the only mutation is
"find or append one Import element", so unrelated content survives and
the edit is idempotent.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path

from .utils.errors import DescriptorNotFoundError

logger = logging.getLogger(__name__)

# Build output and VCS metadata never hold source descriptors
_SKIP_DIRS = {"bin", "obj", ".git", ".vs", "node_modules"}

_NS_RE = re.compile(r"^\{([^}]*)\}")

# Optional BOM, XML declaration and comments ahead of the root element
_PROLOG_RE = re.compile(rb"^(?:\xef\xbb\xbf)?\s*(?:<\?xml[^>]*\?>\s*)?(?:<!--.*?-->\s*)*", re.DOTALL)


def _namespace(element: ET.Element) -> str:
    """Return the ``{uri}`` prefix of ``element``'s tag, or ''."""
    match = _NS_RE.match(element.tag)
    return match.group(0) if match else ""


def _parse(path: Path) -> ET.ElementTree:
    # Keep comments and processing instructions so a rewrite preserves them
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True, insert_pis=True))
    return ET.parse(path, parser=parser)


def _text(element: ET.Element | None) -> str | None:
    if element is None:
        return None
    return element.text.strip() if element.text else None


@dataclass(frozen=True)
class BuildDescriptor:
    """A project file and the package identifier it publishes under."""

    path: Path
    package_id: str

    @classmethod
    def load(cls, path: Path) -> BuildDescriptor:
        """Read ``path`` and resolve its package identifier."""
        return cls(path=path.resolve(), package_id=read_package_id(path))

    @property
    def directory(self) -> Path:
        return self.path.parent


def is_test_descriptor(path: Path, test_pattern: str = "test") -> bool:
    """Check whether a descriptor's file name marks it as a test project."""
    return re.search(test_pattern, path.name, re.IGNORECASE) is not None


def find_build_descriptor(
    folder: Path,
    pattern: str = "*.csproj",
    test_pattern: str = "test",
) -> Path | None:
    """Find the primary build descriptor under ``folder``.

    Searches recursively, drops test descriptors and anything inside build
    output folders, and orders the rest by depth then path so the pick does
    not depend on filesystem enumeration order.

    Returns:
        The chosen descriptor, or None if nothing qualifies.
    """
    folder = Path(folder)
    if not folder.is_dir():
        return None

    candidates = []
    for path in folder.rglob(pattern):
        relative = path.relative_to(folder)
        if any(part in _SKIP_DIRS for part in relative.parts[:-1]):
            continue
        if not path.is_file() or is_test_descriptor(path, test_pattern):
            continue
        candidates.append(path)

    if not candidates:
        return None

    candidates.sort(key=lambda p: (len(p.relative_to(folder).parts), str(p.relative_to(folder)).lower()))
    logger.debug(f"Descriptor candidates in {folder}: {[str(c) for c in candidates]}")
    return candidates[0]


def require_build_descriptor(
    folder: Path,
    pattern: str = "*.csproj",
    test_pattern: str = "test",
) -> Path:
    """Like find_build_descriptor, but a missing descriptor is an error.

    Raises:
        DescriptorNotFoundError: If no descriptor qualifies.
    """
    path = find_build_descriptor(folder, pattern, test_pattern)
    if path is None:
        raise DescriptorNotFoundError(str(folder))
    return path


def read_package_id(path: Path) -> str:
    """Resolve the identifier other projects reference this one by.

    PackageId wins, then AssemblyName, then the file's own base name.
    Values that are bare MSBuild property references are ignored.
    """
    root = _parse(path).getroot()
    ns = _namespace(root)

    for tag in ("PackageId", "AssemblyName"):
        for element in root.iter(f"{ns}{tag}"):
            value = _text(element)
            if value and "$(" not in value:
                return value

    return path.stem


def has_override_import(root: ET.Element, override_filename: str) -> bool:
    """Check for an Import element whose Project names the override file."""
    ns = _namespace(root)
    for element in root.iter(f"{ns}Import"):
        project = (element.get("Project") or "").strip().replace("\\", "/")
        if project.rsplit("/", 1)[-1].rsplit(")", 1)[-1] == override_filename:
            return True
    return False


def ensure_override_import(descriptor: Path, override_filename: str) -> bool:
    """Add a guarded Import of ``override_filename`` to ``descriptor``.

    The import is only added when no Import of that file exists yet.

    Returns:
        True if the descriptor was rewritten.
    """
    raw = descriptor.read_bytes()
    tree = _parse(descriptor)
    root = tree.getroot()

    if has_override_import(root, override_filename):
        logger.debug(f"{descriptor.name} already imports {override_filename}")
        return False

    ns = _namespace(root)
    if ns:
        ET.register_namespace("", ns[1:-1])

    element = ET.Element(
        f"{ns}Import",
        {"Project": override_filename, "Condition": f"Exists('{override_filename}')"},
    )
    # Reuse the indentation of the existing children
    if len(root):
        last = root[-1]
        element.tail = last.tail
        last.tail = root.text
    else:
        root.text = "\n  "
        element.tail = "\n"
    root.append(element)

    # Original prolog and trailing whitespace are kept byte for byte
    prolog = _PROLOG_RE.match(raw).group(0)
    trailer = raw[len(raw.rstrip()):]
    body = ET.tostring(root, encoding="unicode").encode("utf-8")
    descriptor.write_bytes(prolog + body + trailer)
    logger.info(f"Added import of {override_filename} to {descriptor}")
    return True


def render_override(package_id: str, library_descriptor: Path) -> str:
    """Render the fragment that swaps the package for a project reference."""
    project = ET.Element("Project")
    group = ET.SubElement(project, "ItemGroup")
    ET.SubElement(group, "PackageReference", {"Remove": package_id})
    ET.SubElement(group, "ProjectReference", {"Include": str(library_descriptor)})
    ET.indent(project)
    return ET.tostring(project, encoding="unicode") + "\n"


def write_override_file(
    app_descriptor: Path,
    library: BuildDescriptor,
    override_filename: str,
) -> Path:
    """Write the override fragment next to ``app_descriptor``.

    Any previous content is replaced.
    """
    target = app_descriptor.parent / override_filename
    target.write_text(render_override(library.package_id, library.path), encoding="utf-8")
    logger.info(f"Wrote {target}")
    return target


def ensure_ignored(repo_path: Path, entry: str, ignore_filename: str = ".gitignore") -> bool:
    """Append ``entry`` to the repository's ignore list if it is missing.

    Repositories without an ignore file are left alone.

    Returns:
        True if the file was changed.
    """
    ignore_file = repo_path / ignore_filename
    if not ignore_file.is_file():
        return False

    content = ignore_file.read_text(encoding="utf-8")
    for line in content.splitlines():
        if line.strip().lstrip("/") == entry:
            return False

    if content and not content.endswith("\n"):
        content += "\n"
    ignore_file.write_text(content + entry + "\n", encoding="utf-8")
    logger.info(f"Added {entry} to {ignore_file}")
    return True
