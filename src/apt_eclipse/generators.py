"""Tasks that generate the Eclipse APT metadata files."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from loguru import logger

from .factorypath import Factorypath, read_factorypath, write_factorypath
from .properties import read_properties, write_properties
from .settings import MANAGED_KEYS, EclipseFactorypath, EclipseJdtApt
from .tasks import Task

if TYPE_CHECKING:
    from .project import Project


class GeneratorTask(Task):
    """Reads ``input_file`` when it exists, merges, and writes ``output_file``."""

    def __init__(self, name: str, project: "Project") -> None:
        super().__init__(name, project)
        self.input_file: Optional[Path] = None
        self.output_file: Optional[Path] = None

    @property
    def outputs(self) -> List[Path]:
        return [self.output_file] if self.output_file is not None else []

    def _existing_input(self) -> Optional[Path]:
        if self.input_file is not None and self.input_file.exists():
            return self.input_file
        return None

    def _require_output(self) -> Path:
        if self.output_file is None:
            raise ValueError(f"No output file configured for task ':{self.name}'")
        return self.output_file


class GenerateEclipseJdtApt(GeneratorTask):
    """Generates ``.settings/org.eclipse.jdt.apt.core.prefs``."""

    def __init__(self, name: str, project: "Project") -> None:
        super().__init__(name, project)
        self.jdt_apt: Optional[EclipseJdtApt] = None

    def run(self) -> None:
        output = self._require_output()
        if self.jdt_apt is None:
            raise ValueError(f"No JDT APT settings bound to task ':{self.name}'")
        source = self._existing_input()
        existing = read_properties(source) if source else {}
        merged = self.jdt_apt.file.merge(existing, self.jdt_apt.to_properties(), MANAGED_KEYS)
        write_properties(output, merged)
        logger.info("Wrote {} ({} keys)", output, len(merged))


class GenerateEclipseFactorypath(GeneratorTask):
    """Generates ``.factorypath``."""

    def __init__(self, name: str, project: "Project") -> None:
        super().__init__(name, project)
        self.factorypath: Optional[EclipseFactorypath] = None

    def run(self) -> None:
        output = self._require_output()
        if self.factorypath is None:
            raise ValueError(f"No factorypath settings bound to task ':{self.name}'")
        source = self._existing_input()
        existing = read_factorypath(source) if source else Factorypath()
        entries = self.factorypath.entries()
        root = self.factorypath.file.merge(existing, entries)
        write_factorypath(output, root)
        logger.info("Wrote {} ({} processor path entries)", output, len(entries))


__all__ = ["GenerateEclipseFactorypath", "GenerateEclipseJdtApt", "GeneratorTask"]
