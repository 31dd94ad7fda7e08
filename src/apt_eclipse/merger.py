"""Merge strategies combining generated content with a file already on disk."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Callable, Dict, Iterable, List

from .factorypath import EXTJAR, Factorypath, FactorypathEntry

PropertiesAction = Callable[[Dict[str, str]], None]
FactorypathAction = Callable[[Factorypath], None]
XmlAction = Callable[[ET.Element], None]


class PropertiesFileContentMerger:
    """Hooks around the merge of a properties file.

    ``before_merged`` actions receive the properties loaded from disk and may
    edit them in place. ``when_merged`` actions receive the merged properties
    right before they are written.
    """

    def __init__(self) -> None:
        self.before_merged_actions: List[PropertiesAction] = []
        self.when_merged_actions: List[PropertiesAction] = []

    def before_merged(self, action: PropertiesAction) -> None:
        self.before_merged_actions.append(action)

    def when_merged(self, action: PropertiesAction) -> None:
        self.when_merged_actions.append(action)

    def merge(
        self,
        existing: Dict[str, str],
        generated: Dict[str, str],
        managed_keys: Iterable[str],
    ) -> Dict[str, str]:
        """Overlay ``generated`` on ``existing``.

        Keys in ``managed_keys`` are owned by the generator: they are dropped
        from the existing content even when ``generated`` omits them. The result
        lists generated keys first, then the preserved keys in file order.
        """

        for action in self.before_merged_actions:
            action(existing)
        owned = set(managed_keys) | set(generated)
        merged: Dict[str, str] = dict(generated)
        for key, value in existing.items():
            if key not in owned:
                merged[key] = value
        for action in self.when_merged_actions:
            action(merged)
        return merged


class XmlFileContentMerger:
    """Hooks around the merge of the factorypath XML file.

    ``before_merged`` and ``when_merged`` work on the :class:`Factorypath`
    model; ``with_xml`` actions get the final root element.
    """

    def __init__(self) -> None:
        self.before_merged_actions: List[FactorypathAction] = []
        self.when_merged_actions: List[FactorypathAction] = []
        self.with_xml_actions: List[XmlAction] = []

    def before_merged(self, action: FactorypathAction) -> None:
        self.before_merged_actions.append(action)

    def when_merged(self, action: FactorypathAction) -> None:
        self.when_merged_actions.append(action)

    def with_xml(self, action: XmlAction) -> None:
        self.with_xml_actions.append(action)

    def merge(self, existing: Factorypath, generated: List[FactorypathEntry]) -> ET.Element:
        for action in self.before_merged_actions:
            action(existing)
        kept = [entry for entry in existing.entries if entry.kind != EXTJAR]
        merged = Factorypath(entries=kept + list(generated), document=existing.document)
        for action in self.when_merged_actions:
            action(merged)
        root = merged.to_element()
        for action in self.with_xml_actions:
            action(root)
        return root


__all__ = ["PropertiesFileContentMerger", "XmlFileContentMerger"]
