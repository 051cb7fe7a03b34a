"""Zip container access and string-level XML patching for OOXML files."""

import logging
import os
import re
import tempfile
import zipfile
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape, unescape

logger = logging.getLogger(__name__)

CONTENT_TYPES_PART = "[Content_Types].xml"
CORE_PROPERTIES_PART = "docProps/core.xml"

R_NAMESPACE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
W_NAMESPACE = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"

_RELATIONSHIP_ID_PATTERN = re.compile(r'Id="rId(\d+)"')


def escape_xml(text: str) -> str:
    """Escape text for use in element content or attribute values."""
    return escape(text, {'"': "&quot;", "'": "&apos;"})


def update_xml_element(
    xml: str,
    tag: str,
    value: str,
    parent_close: str = "</cp:coreProperties>",
    attributes: str = "",
) -> tuple[str, bool]:
    """
    Set the text of ``<tag>`` or insert the element before ``parent_close``.

    Attributes already on an existing element are kept; ``attributes`` is used
    only when inserting.

    Returns:
        (xml, changed) - changed is False if the element could not be placed
    """
    escaped = escape_xml(value)
    pattern = re.compile(
        rf"<{re.escape(tag)}(\s[^>]*?)?(?:/>|>[^<]*</{re.escape(tag)}>)"
    )
    match = pattern.search(xml)
    if match:
        attrs = (match.group(1) or "").rstrip()
        element = f"<{tag}{attrs}>{escaped}</{tag}>"
        return xml[: match.start()] + element + xml[match.end():], True

    if parent_close in xml:
        element = f"<{tag}{attributes}>{escaped}</{tag}>"
        return xml.replace(parent_close, element + parent_close, 1), True

    return xml, False


def paragraph_texts(xml: str, prefix: str) -> list[str]:
    """
    Plain text of each paragraph in a WordprocessingML (``w``) or
    DrawingML (``a``) fragment, runs joined and entities unescaped.
    """
    p = re.escape(prefix)
    paragraphs = re.findall(rf"<{p}:p(?:\s[^>]*)?>(.*?)</{p}:p>", xml, re.DOTALL)
    run_text = re.compile(rf"<{p}:t(?:\s[^>]*)?>([^<]*)</{p}:t>")
    return [
        unescape("".join(run_text.findall(body)), {"&quot;": '"', "&apos;": "'"})
        for body in paragraphs
    ]


def has_paragraph(xml: str, prefix: str, text: str) -> bool:
    """Whether some paragraph's whole text is ``text`` (surrounding whitespace ignored)."""
    wanted = text.strip()
    return any(t.strip() == wanted for t in paragraph_texts(xml, prefix))


def next_relationship_id(rels_xml: str) -> str:
    """First unused rIdN in a relationships part."""
    ids = [int(m) for m in _RELATIONSHIP_ID_PATTERN.findall(rels_xml)]
    return f"rId{max(ids, default=0) + 1}"


def ensure_namespace(xml: str, root_tag: str, prefix: str, uri: str) -> str:
    """Declare ``xmlns:prefix`` on the root element if it is missing."""
    if f"xmlns:{prefix}=" in xml:
        return xml
    match = re.search(rf"<{re.escape(root_tag)}\b", xml)
    if not match:
        return xml
    insert_at = match.end()
    return xml[:insert_at] + f' xmlns:{prefix}="{uri}"' + xml[insert_at:]


def part_number(name: str) -> int:
    """Trailing number of a part name (slide12.xml -> 12) for natural ordering."""
    match = re.search(r"(\d+)\.xml$", name)
    return int(match.group(1)) if match else 0


class OoxmlPackage:
    """
    An OOXML zip container held in memory for patching.

    Parts keep their original order and compression when saved; new parts are
    appended deflated.
    """

    def __init__(self, path: Path, infos: list[zipfile.ZipInfo], parts: dict[str, bytes]):
        self.path = Path(path)
        self._infos = infos
        self._parts = parts
        self._dirty = False

    @classmethod
    def open(cls, path: Path) -> "OoxmlPackage":
        """
        Read every part of the container.

        Raises:
            zipfile.BadZipFile: If the file is not a zip archive
            OSError: If the file cannot be read
        """
        with zipfile.ZipFile(path, "r") as zf:
            infos = zf.infolist()
            parts = {info.filename: zf.read(info.filename) for info in infos}
        logger.debug(f"Opened {path} with {len(parts)} parts")
        return cls(path, infos, parts)

    def names(self) -> list[str]:
        return list(self._parts)

    def has(self, name: str) -> bool:
        return name in self._parts

    def read_text(self, name: str) -> Optional[str]:
        data = self._parts.get(name)
        if data is None:
            return None
        return data.decode("utf-8")

    def write_text(self, name: str, text: str):
        self._parts[name] = text.encode("utf-8")
        self._dirty = True

    @property
    def modified(self) -> bool:
        return self._dirty

    def save(self, path: Optional[Path] = None):
        """Write the container atomically (temporary file, then replace)."""
        target = Path(path or self.path)
        known = {info.filename for info in self._infos}
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent)
        )
        os.close(fd)
        try:
            with zipfile.ZipFile(tmp_name, "w", compression=zipfile.ZIP_DEFLATED) as zf:
                for info in self._infos:
                    zf.writestr(info, self._parts[info.filename])
                for name, data in self._parts.items():
                    if name not in known:
                        zf.writestr(name, data, compress_type=zipfile.ZIP_DEFLATED)
            os.replace(tmp_name, target)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
        self._dirty = False
        logger.debug(f"Saved {target}")
