"""Eclipse APT settings exposed on the project's Eclipse model."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Mapping, Optional

from .factorypath import FactorypathEntry
from .merger import PropertiesFileContentMerger, XmlFileContentMerger
from .models import Configuration
from .providers import ConventionMapping, Property, Provider

if TYPE_CHECKING:
    from .project import Project

PREFERENCES_VERSION = "eclipse.preferences.version"
PROCESS_ANNOTATIONS = "org.eclipse.jdt.core.compiler.processAnnotations"
GEN_SRC_DIR = "org.eclipse.jdt.apt.genSrcDir"
RECONCILE_ENABLED = "org.eclipse.jdt.apt.reconcileEnabled"
PROCESSOR_OPTIONS = "org.eclipse.jdt.apt.processorOptions"

MANAGED_KEYS = (
    PREFERENCES_VERSION,
    PROCESS_ANNOTATIONS,
    GEN_SRC_DIR,
    RECONCILE_ENABLED,
    PROCESSOR_OPTIONS,
)

DEFAULT_GEN_SRC_DIR = ".apt_generated"


def _escape_option(text: str, *, is_key: bool) -> str:
    escaped = text.replace("\\", "\\\\").replace(" ", "\\ ")
    if is_key:
        escaped = escaped.replace("=", "\\=")
    return escaped


def _option_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_processor_options(options: Mapping[str, Any]) -> str:
    """Encode processor options as ``-Akey=value`` tokens separated by single spaces.

    A ``None`` value yields a bare ``-Akey``. Backslashes and spaces are
    escaped in keys and values, ``=`` in keys only.
    """

    tokens = []
    for key, value in options.items():
        token = "-A" + _escape_option(str(key), is_key=True)
        if value is not None:
            token += "=" + _escape_option(_option_value(value), is_key=False)
        tokens.append(token)
    return " ".join(tokens)


class EclipseJdtApt:
    """Annotation processing settings for Eclipse JDT, registered as ``eclipse.jdt.apt``.

    Every field accepts either a plain value or a :class:`Provider`. Fields
    that were never set fall back to conventions that are evaluated on each
    read, see :attr:`convention_mapping`.
    """

    def __init__(self, project: "Project", file: PropertiesFileContentMerger) -> None:
        self._project = project
        self.file = file
        self._apt_enabled: Property[bool] = Property("aptEnabled")
        self._apt_enabled.convention(True)
        self._reconcile_enabled: Property[bool] = Property("reconcileEnabled")
        self._reconcile_enabled.convention(True)
        self._gen_src_dir: Property[Any] = Property("genSrcDir")
        self._gen_src_dir.convention(lambda: project.file(DEFAULT_GEN_SRC_DIR))
        self._processor_options: Property[Mapping[str, Any]] = Property("processorOptions")
        self._processor_options.convention(dict)
        self.convention_mapping = ConventionMapping(
            {
                "aptEnabled": self._apt_enabled,
                "reconcileEnabled": self._reconcile_enabled,
                "genSrcDir": self._gen_src_dir,
                "processorOptions": self._processor_options,
            }
        )

    @property
    def apt_enabled(self) -> bool:
        return bool(self._apt_enabled.get())

    @apt_enabled.setter
    def apt_enabled(self, value: bool | Provider[bool]) -> None:
        if value is None:
            raise ValueError("aptEnabled cannot be None")
        self._apt_enabled.set(value)

    @property
    def reconcile_enabled(self) -> bool:
        return bool(self._reconcile_enabled.get())

    @reconcile_enabled.setter
    def reconcile_enabled(self, value: bool | Provider[bool]) -> None:
        if value is None:
            raise ValueError("reconcileEnabled cannot be None")
        self._reconcile_enabled.set(value)

    @property
    def gen_src_dir(self) -> Path:
        """Generated sources directory, resolved against the project directory."""

        return self._project.file(self._gen_src_dir.get())

    @gen_src_dir.setter
    def gen_src_dir(self, value: Any) -> None:
        if value is None:
            raise ValueError("genSrcDir cannot be None")
        self._gen_src_dir.set(value)

    @property
    def processor_options(self) -> Optional[Dict[str, Any]]:
        options = self._processor_options.get_or_none()
        return None if options is None else dict(options)

    @processor_options.setter
    def processor_options(self, value: Mapping[str, Any] | Provider[Mapping[str, Any]] | None) -> None:
        self._processor_options.set(value)

    def configure_file(self, action: Callable[[PropertiesFileContentMerger], None]) -> None:
        action(self.file)

    def to_properties(self) -> Dict[str, str]:
        """The generated preference keys, in the order they are written."""

        properties = {
            PREFERENCES_VERSION: "1",
            PROCESS_ANNOTATIONS: "enabled" if self.apt_enabled else "disabled",
            GEN_SRC_DIR: self._project.relative_path(self.gen_src_dir),
            RECONCILE_ENABLED: "true" if self.reconcile_enabled else "false",
        }
        options = self.processor_options
        if options:
            properties[PROCESSOR_OPTIONS] = encode_processor_options(options)
        return properties


def _unique(configurations: Iterable[Configuration]) -> List[Configuration]:
    unique: List[Configuration] = []
    for configuration in configurations:
        if configuration not in unique:
            unique.append(configuration)
    return unique


class EclipseFactorypath:
    """Factorypath settings, registered as ``eclipse.factorypath``."""

    def __init__(self, file: XmlFileContentMerger) -> None:
        self.file = file
        self._plus_configurations: List[Configuration] = []
        self._minus_configurations: List[Configuration] = []

    @property
    def plus_configurations(self) -> List[Configuration]:
        return list(self._plus_configurations)

    @plus_configurations.setter
    def plus_configurations(self, configurations: Iterable[Configuration]) -> None:
        self._plus_configurations = _unique(configurations)

    @property
    def minus_configurations(self) -> List[Configuration]:
        return list(self._minus_configurations)

    @minus_configurations.setter
    def minus_configurations(self, configurations: Iterable[Configuration]) -> None:
        self._minus_configurations = _unique(configurations)

    def configure_file(self, action: Callable[[XmlFileContentMerger], None]) -> None:
        action(self.file)

    def resolve_paths(self) -> List[Path]:
        excluded = {path for configuration in self._minus_configurations for path in configuration.resolve()}
        paths: List[Path] = []
        for configuration in self._plus_configurations:
            for path in configuration.resolve():
                if path not in excluded and path not in paths:
                    paths.append(path)
        return paths

    def entries(self) -> List[FactorypathEntry]:
        return [FactorypathEntry(id=str(path)) for path in self.resolve_paths()]


__all__ = [
    "EclipseFactorypath",
    "EclipseJdtApt",
    "MANAGED_KEYS",
    "encode_processor_options",
]
