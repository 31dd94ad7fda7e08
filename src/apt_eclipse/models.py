"""Host build model: source sets, processor options, configurations."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Type, TypeVar

T = TypeVar("T")

MAIN_SOURCE_SET_NAME = "main"
TEST_SOURCE_SET_NAME = "test"


class UnknownDomainObjectError(LookupError):
    """Raised when a required task, extension, configuration or source set is missing."""

    def __init__(self, kind: str, name: str, owner: str | None = None) -> None:
        location = f" in {owner}" if owner else ""
        super().__init__(f"{kind} with name '{name}' not found{location}.")
        self.kind = kind
        self.name = name


def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


@dataclass(slots=True)
class SourceSet:
    """A named group of source roots compiled together."""

    name: str
    java_dirs: List[Path] = field(default_factory=list)
    compile_java_task_name: str = ""
    annotation_processor_configuration_name: str = ""

    def __post_init__(self) -> None:
        if not self.compile_java_task_name:
            self.compile_java_task_name = self.task_name("compile", "java")
        if not self.annotation_processor_configuration_name:
            self.annotation_processor_configuration_name = self.configuration_name("annotationProcessor")

    def task_name(self, verb: str, target: str) -> str:
        prefix = "" if self.name == MAIN_SOURCE_SET_NAME else _capitalize(self.name)
        return f"{verb}{prefix}{_capitalize(target)}"

    def configuration_name(self, base: str) -> str:
        if self.name == MAIN_SOURCE_SET_NAME:
            return base
        return f"{self.name}{_capitalize(base)}"


@dataclass(slots=True)
class AptOptions:
    """Annotation processing options attached to a compile task."""

    annotation_processing: bool = True
    processor_args: Dict[str, Any] = field(default_factory=dict)


class Configuration:
    """A named classpath, resolvable to an ordered list of artifact paths."""

    def __init__(self, name: str, base_dir: Path) -> None:
        self.name = name
        self._base_dir = base_dir
        self.files: List[Path] = []
        self.extends_from: List[Configuration] = []

    def add_files(self, *paths: str | Path) -> None:
        self.files.extend(Path(path) for path in paths)

    def extend(self, *configurations: "Configuration") -> None:
        for configuration in configurations:
            if configuration is self:
                raise ValueError(f"Configuration '{self.name}' cannot extend itself")
            if configuration not in self.extends_from:
                self.extends_from.append(configuration)

    def resolve(self) -> List[Path]:
        return self._resolve(set())

    def _resolve(self, visiting: set[str]) -> List[Path]:
        if self.name in visiting:
            raise ValueError(f"Circular extendsFrom detected for configuration '{self.name}'")
        visiting = visiting | {self.name}
        resolved: List[Path] = []
        seen: set[Path] = set()
        candidates = [self._absolute(path) for path in self.files]
        for parent in self.extends_from:
            candidates.extend(parent._resolve(visiting))
        for path in candidates:
            if path not in seen:
                seen.add(path)
                resolved.append(path)
        return resolved

    def _absolute(self, path: Path) -> Path:
        return path if path.is_absolute() else (self._base_dir / path).resolve()

    def __repr__(self) -> str:
        return f"Configuration({self.name!r})"


class NamedContainer(Generic[T]):
    """Ordered container of named domain objects."""

    def __init__(self, kind: str, owner: str, factory: Callable[[str], T]) -> None:
        self._kind = kind
        self._owner = owner
        self._factory = factory
        self._items: Dict[str, T] = {}

    def create(self, name: str) -> T:
        if name in self._items:
            raise ValueError(f"Cannot add {self._kind.lower()} '{name}' as it already exists.")
        item = self._factory(name)
        self._items[name] = item
        return item

    def maybe_create(self, name: str) -> T:
        if name in self._items:
            return self._items[name]
        return self.create(name)

    def get_by_name(self, name: str) -> T:
        try:
            return self._items[name]
        except KeyError:
            raise UnknownDomainObjectError(self._kind, name, self._owner) from None

    def names(self) -> List[str]:
        return list(self._items)

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)


class ExtensionContainer:
    """Named extensions attached to a model object."""

    def __init__(self, owner: str) -> None:
        self._owner = owner
        self._extensions: Dict[str, Any] = {}

    def add(self, name: str, extension: Any) -> Any:
        if name in self._extensions:
            raise ValueError(f"Cannot add extension with name '{name}', as there is an extension already registered with that name.")
        self._extensions[name] = extension
        return extension

    def create(self, name: str, extension_type: Type[T], *args: Any, **kwargs: Any) -> T:
        return self.add(name, extension_type(*args, **kwargs))

    def get_by_name(self, name: str) -> Any:
        try:
            return self._extensions[name]
        except KeyError:
            raise UnknownDomainObjectError("Extension", name, self._owner) from None

    def find_by_type(self, extension_type: Type[T]) -> Optional[T]:
        for extension in self._extensions.values():
            if isinstance(extension, extension_type):
                return extension
        return None

    def get_by_type(self, extension_type: Type[T]) -> T:
        extension = self.find_by_type(extension_type)
        if extension is None:
            raise UnknownDomainObjectError("Extension of type", extension_type.__name__, self._owner)
        return extension

    def __getitem__(self, name: str) -> Any:
        return self.get_by_name(name)

    def __contains__(self, name: object) -> bool:
        return name in self._extensions


__all__ = [
    "AptOptions",
    "Configuration",
    "ExtensionContainer",
    "MAIN_SOURCE_SET_NAME",
    "NamedContainer",
    "SourceSet",
    "TEST_SOURCE_SET_NAME",
    "UnknownDomainObjectError",
]
