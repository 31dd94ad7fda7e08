"""The Eclipse ``.factorypath`` XML format."""

from __future__ import annotations

import copy
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

ROOT_TAG = "factorypath"
ENTRY_TAG = "factorypathentry"
EXTJAR = "EXTJAR"

_XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'
_KNOWN_ATTRIBUTES = ("kind", "id", "enabled", "runInBatchMode")


class FactorypathFormatError(ValueError):
    """Raised when an existing factorypath file cannot be parsed."""


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() == "true"


@dataclass(slots=True)
class FactorypathEntry:
    """A ``<factorypathentry>`` element."""

    id: str
    kind: str = EXTJAR
    enabled: bool = True
    run_in_batch_mode: bool = False
    attributes: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_element(cls, element: ET.Element) -> "FactorypathEntry":
        entry_id = element.get("id")
        kind = element.get("kind")
        if not entry_id or not kind:
            raise FactorypathFormatError(f"<{ENTRY_TAG}> requires 'kind' and 'id' attributes, got {element.attrib}")
        return cls(
            id=entry_id,
            kind=kind,
            enabled=_flag(element.get("enabled"), True),
            run_in_batch_mode=_flag(element.get("runInBatchMode"), False),
            attributes={k: v for k, v in element.attrib.items() if k not in _KNOWN_ATTRIBUTES},
        )

    def to_element(self) -> ET.Element:
        element = ET.Element(ENTRY_TAG)
        element.set("kind", self.kind)
        element.set("id", self.id)
        element.set("enabled", "true" if self.enabled else "false")
        element.set("runInBatchMode", "true" if self.run_in_batch_mode else "false")
        for key, value in self.attributes.items():
            element.set(key, value)
        return element


@dataclass(slots=True)
class Factorypath:
    """Factorypath content: the entries plus the parsed document they came from."""

    entries: List[FactorypathEntry] = field(default_factory=list)
    document: Optional[ET.Element] = None

    def to_element(self) -> ET.Element:
        """Build the root element, keeping non-entry children of the parsed document."""

        root = copy.deepcopy(self.document) if self.document is not None else ET.Element(ROOT_TAG)
        for child in list(root):
            if child.tag == ENTRY_TAG:
                root.remove(child)
        for entry in self.entries:
            root.append(entry.to_element())
        return root


def loads(text: str) -> Factorypath:
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise FactorypathFormatError(f"Malformed factorypath XML: {exc}") from exc
    if root.tag != ROOT_TAG:
        raise FactorypathFormatError(f"Expected <{ROOT_TAG}> root element, found <{root.tag}>")
    entries = [FactorypathEntry.from_element(child) for child in root if child.tag == ENTRY_TAG]
    return Factorypath(entries=entries, document=root)


def read_factorypath(path: Path) -> Factorypath:
    return loads(path.read_text(encoding="utf-8"))


def to_xml(root: ET.Element) -> str:
    ET.indent(root, space="\t")
    return _XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


def write_factorypath(path: Path, root: ET.Element) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_xml(root), encoding="utf-8", newline="\n")


__all__ = [
    "EXTJAR",
    "Factorypath",
    "FactorypathEntry",
    "FactorypathFormatError",
    "loads",
    "read_factorypath",
    "to_xml",
    "write_factorypath",
]
