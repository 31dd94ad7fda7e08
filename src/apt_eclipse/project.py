"""The project: root of the host build model."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Type, TypeVar

from loguru import logger

from .models import Configuration, ExtensionContainer, NamedContainer, SourceSet
from .providers import Provider
from .tasks import Task, TaskContainer, TaskGraph

T = TypeVar("T")


class Plugin(Protocol):
    def apply(self, project: "Project") -> None:
        ...


PluginT = TypeVar("PluginT", bound=Plugin)


class PluginContainer:
    """Applies plugins once and notifies listeners waiting for a plugin type."""

    def __init__(self, project: "Project") -> None:
        self._project = project
        self._plugins: Dict[type, Plugin] = {}
        self._listeners: List[tuple[type, Callable[[Any], None]]] = []

    def apply(self, plugin_type: Type[PluginT]) -> PluginT:
        existing = self._plugins.get(plugin_type)
        if existing is not None:
            return existing  # type: ignore[return-value]
        plugin = plugin_type()
        self._plugins[plugin_type] = plugin
        logger.debug("Applying plugin {} to project '{}'", plugin_type.__name__, self._project.name)
        plugin.apply(self._project)
        for listened_type, action in list(self._listeners):
            if isinstance(plugin, listened_type):
                action(plugin)
        return plugin

    def with_type(self, plugin_type: Type[PluginT], action: Callable[[PluginT], None]) -> None:
        """Run ``action`` for an applied plugin of that type, now or when it gets applied."""

        self._listeners.append((plugin_type, action))
        for plugin in list(self._plugins.values()):
            if isinstance(plugin, plugin_type):
                action(plugin)


class Project:
    """A project directory with its tasks, configurations, source sets and extensions."""

    def __init__(self, name: str, project_dir: Path, *, lazy_tasks: bool = True) -> None:
        self.name = name
        self.project_dir = Path(project_dir).resolve()
        owner = f"project '{name}'"
        self.tasks = TaskContainer(self, lazy=lazy_tasks)
        self.configurations: NamedContainer[Configuration] = NamedContainer(
            "Configuration", owner, lambda config_name: Configuration(config_name, self.project_dir)
        )
        self.source_sets: NamedContainer[SourceSet] = NamedContainer("SourceSet", owner, SourceSet)
        self.extensions = ExtensionContainer(owner)
        self.plugins = PluginContainer(self)

    def file(self, path: str | os.PathLike[str] | Provider[Any]) -> Path:
        """Resolve a path against the project directory."""

        if isinstance(path, Provider):
            path = path.get()
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.project_dir / candidate
        return candidate.resolve()

    def relative_path(self, path: Path) -> str:
        """Project-relative posix path, or the absolute path when outside the project."""

        resolved = self.file(path)
        try:
            return resolved.relative_to(self.project_dir).as_posix()
        except ValueError:
            return resolved.as_posix()

    def provider(self, compute: Callable[[], Optional[T]]) -> Provider[T]:
        return Provider(compute, name=f"provider in project '{self.name}'")

    def apply_plugin(self, plugin_type: Type[PluginT]) -> PluginT:
        return self.plugins.apply(plugin_type)

    def run(self, task_names: List[str]) -> List[Task]:
        return TaskGraph(self.tasks).run(task_names)

    def __repr__(self) -> str:
        return f"Project({self.name!r}, {str(self.project_dir)!r})"


__all__ = ["Plugin", "PluginContainer", "Project"]
