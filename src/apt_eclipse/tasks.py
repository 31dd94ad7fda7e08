"""Tasks, the task container and the task graph."""

from __future__ import annotations

import shutil
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, List, Optional, Type, TypeVar, Union

from loguru import logger

from .models import ExtensionContainer, UnknownDomainObjectError

if TYPE_CHECKING:
    from .project import Project

TaskT = TypeVar("TaskT", bound="Task")
TaskAction = Callable[[TaskT], None]


class TaskState(str, Enum):
    """Lifecycle of a task within a single build."""

    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    SCHEDULED = "scheduled"
    EXECUTED = "executed"
    CLEANED = "cleaned"


class TaskExecutionError(RuntimeError):
    """Raised when a task fails; carries the task name and the underlying cause."""

    def __init__(self, task_name: str, cause: BaseException | str) -> None:
        super().__init__(f"Execution failed for task ':{task_name}': {cause}")
        self.task_name = task_name
        self.cause = cause


class Task:
    """Base task. Subclasses override :meth:`run`."""

    def __init__(self, name: str, project: "Project") -> None:
        self.name = name
        self.project = project
        self.description: Optional[str] = None
        self.group: Optional[str] = None
        self.state = TaskState.UNCONFIGURED
        self.extensions = ExtensionContainer(f"task ':{name}'")
        self._dependencies: List[Union["Task", "TaskProvider", str]] = []

    def depends_on(self, *dependencies: Union["Task", "TaskProvider", str]) -> "Task":
        for dependency in dependencies:
            if not isinstance(dependency, (Task, TaskProvider, str)):
                raise TypeError(f"Cannot use {dependency!r} as a dependency of task ':{self.name}'")
            self._dependencies.append(dependency)
        return self

    @property
    def dependencies(self) -> List[Union["Task", "TaskProvider", str]]:
        return list(self._dependencies)

    def resolve_dependencies(self) -> List["Task"]:
        resolved: List[Task] = []
        for dependency in self._dependencies:
            if isinstance(dependency, Task):
                task = dependency
            elif isinstance(dependency, TaskProvider):
                task = dependency.get()
            else:
                task = self.project.tasks.get_by_name(dependency)
            if task not in resolved:
                resolved.append(task)
        return resolved

    @property
    def outputs(self) -> List[Path]:
        return []

    def execute(self) -> None:
        logger.info("> Task :{}", self.name)
        try:
            self.run()
        except TaskExecutionError:
            raise
        except Exception as exc:
            raise TaskExecutionError(self.name, exc) from exc
        self.state = TaskState.EXECUTED

    def run(self) -> None:
        """Lifecycle tasks do nothing on their own."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(':{self.name}')"


class DefaultTask(Task):
    pass


class Delete(Task):
    """Deletes files, directories and the outputs of other tasks."""

    def __init__(self, name: str, project: "Project") -> None:
        super().__init__(name, project)
        self._targets: List[Union[Task, "TaskProvider", str, Path]] = []
        self.did_work = False

    def delete(self, *targets: Union[Task, "TaskProvider", str, Path]) -> "Delete":
        self._targets.extend(targets)
        return self

    def run(self) -> None:
        self.did_work = False
        for target in self._targets:
            source: Optional[Task] = None
            if isinstance(target, TaskProvider):
                source = target.get()
            elif isinstance(target, Task):
                source = target
            paths = source.outputs if source is not None else [self.project.file(target)]
            for path in paths:
                self.did_work = _delete_path(path) or self.did_work
            if source is not None:
                source.state = TaskState.CLEANED


def _delete_path(path: Path) -> bool:
    if path.is_dir() and not path.is_symlink():
        logger.debug("Deleting directory {}", path)
        shutil.rmtree(path)
        return True
    if path.exists() or path.is_symlink():
        logger.debug("Deleting {}", path)
        path.unlink()
        return True
    return False


class TaskProvider:
    """Handle on a registered task; creating and configuring it is deferred until needed."""

    def __init__(self, container: "TaskContainer", name: str, task_type: Type[Task]) -> None:
        self._container = container
        self.name = name
        self.task_type = task_type

    def configure(self, action: TaskAction) -> "TaskProvider":
        self._container._configure(self.name, action)
        return self

    def get(self) -> Task:
        return self._container.get_by_name(self.name)

    @property
    def is_realized(self) -> bool:
        return self._container._is_realized(self.name)

    def __repr__(self) -> str:
        return f"TaskProvider(':{self.name}', {self.task_type.__name__})"


class TaskContainer:
    """Task registry supporting eager creation and deferred registration."""

    def __init__(self, project: "Project", *, lazy: bool = True) -> None:
        self._project = project
        self.lazy = lazy
        self._types: Dict[str, Type[Task]] = {}
        self._pending: Dict[str, List[TaskAction]] = {}
        self._tasks: Dict[str, Task] = {}
        self._providers: Dict[str, TaskProvider] = {}

    def register(self, name: str, task_type: Type[TaskT] = DefaultTask, action: Optional[TaskAction] = None) -> TaskProvider:
        if name in self._types:
            raise ValueError(f"Cannot add task '{name}' as a task with that name already exists.")
        self._types[name] = task_type
        self._pending[name] = [action] if action else []
        provider = TaskProvider(self, name, task_type)
        self._providers[name] = provider
        logger.debug("Registered task :{} ({})", name, task_type.__name__)
        return provider

    def create(self, name: str, task_type: Type[TaskT] = DefaultTask, action: Optional[TaskAction] = None) -> TaskT:
        self.register(name, task_type, action)
        return self.get_by_name(name)

    def create_task(self, name: str, task_type: Type[TaskT], action: Optional[TaskAction] = None) -> Union[TaskProvider, TaskT]:
        """Create or register a task depending on the container mode, returning a dependency handle."""

        if self.lazy:
            return self.register(name, task_type, action)
        return self.create(name, task_type, action)

    def configure_task(self, name: str, action: TaskAction) -> None:
        if self.lazy:
            self.named(name).configure(action)
        else:
            action(self.get_by_name(name))

    def named(self, name: str) -> TaskProvider:
        try:
            return self._providers[name]
        except KeyError:
            raise UnknownDomainObjectError("Task", name, f"project '{self._project.name}'") from None

    def get_by_name(self, name: str) -> Task:
        if name not in self._types:
            raise UnknownDomainObjectError("Task", name, f"project '{self._project.name}'")
        if name not in self._tasks:
            self._realize(name)
        return self._tasks[name]

    def names(self) -> List[str]:
        return list(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self):
        return iter([self.get_by_name(name) for name in self.names()])

    def _is_realized(self, name: str) -> bool:
        return name in self._tasks

    def _configure(self, name: str, action: TaskAction) -> None:
        if name in self._tasks:
            action(self._tasks[name])
        else:
            self._pending[name].append(action)

    def _realize(self, name: str) -> None:
        task = self._types[name](name, self._project)
        self._tasks[name] = task
        for action in self._pending.pop(name):
            action(task)
        task.state = TaskState.CONFIGURED
        logger.debug("Realized task :{}", name)


class TaskGraph:
    """Schedules requested tasks after their dependencies; each task runs once."""

    def __init__(self, tasks: TaskContainer) -> None:
        self._tasks = tasks
        self._executed: set[str] = set()

    def plan(self, names: List[str]) -> List[Task]:
        ordered: List[Task] = []
        visiting: List[str] = []

        def _visit(task: Task) -> None:
            if task in ordered:
                return
            if task.name in visiting:
                cycle = " -> ".join(visiting[visiting.index(task.name):] + [task.name])
                raise TaskExecutionError(task.name, f"circular dependency between tasks: {cycle}")
            visiting.append(task.name)
            for dependency in task.resolve_dependencies():
                _visit(dependency)
            visiting.pop()
            ordered.append(task)

        for name in names:
            _visit(self._tasks.get_by_name(name))
        for task in ordered:
            if task.name not in self._executed:
                task.state = TaskState.SCHEDULED
        return ordered

    def run(self, names: List[str]) -> List[Task]:
        executed: List[Task] = []
        for task in self.plan(names):
            if task.name in self._executed:
                continue
            task.execute()
            self._executed.add(task.name)
            executed.append(task)
        return executed


__all__ = [
    "DefaultTask",
    "Delete",
    "Task",
    "TaskContainer",
    "TaskExecutionError",
    "TaskGraph",
    "TaskProvider",
    "TaskState",
]
