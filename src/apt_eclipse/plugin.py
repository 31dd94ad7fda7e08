"""Plugins wiring the host model, the Eclipse model and the APT generators together."""

from __future__ import annotations

from typing import Callable

from loguru import logger

from .generators import GenerateEclipseFactorypath, GenerateEclipseJdtApt
from .merger import PropertiesFileContentMerger, XmlFileContentMerger
from .models import (
    MAIN_SOURCE_SET_NAME,
    TEST_SOURCE_SET_NAME,
    AptOptions,
    ExtensionContainer,
    SourceSet,
)
from .project import Project
from .settings import DEFAULT_GEN_SRC_DIR, EclipseFactorypath, EclipseJdtApt
from .tasks import DefaultTask, Delete, Task, TaskProvider

IDE_GROUP = "IDE"
JDT_APT_PREFS = ".settings/org.eclipse.jdt.apt.core.prefs"
FACTORYPATH = ".factorypath"


class JavaCompile(Task):
    """Compile task placeholder carrying the ``aptOptions`` extension.

    Compilation itself belongs to the real build tool.
    """

    def run(self) -> None:
        logger.debug("Skipping compilation for :{}", self.name)


class JavaPlugin:
    """Creates the ``main`` and ``test`` source sets with their compile tasks and processor paths."""

    def apply(self, project: Project) -> None:
        for name in (MAIN_SOURCE_SET_NAME, TEST_SOURCE_SET_NAME):
            project.source_sets.maybe_create(name)
        for source_set in project.source_sets:
            self._configure_source_set(project, source_set)

    @staticmethod
    def _configure_source_set(project: Project, source_set: SourceSet) -> None:
        if not source_set.java_dirs:
            source_set.java_dirs.append(project.file(f"src/{source_set.name}/java"))

        def _describe(task: Task) -> None:
            task.description = f"Compiles {source_set.name} Java source."

        project.tasks.create_task(source_set.compile_java_task_name, JavaCompile, _describe)
        project.configurations.maybe_create(source_set.annotation_processor_configuration_name)


class AptPlugin:
    """Adds :class:`AptOptions` to every compile task."""

    def apply(self, project: Project) -> None:
        project.apply_plugin(JavaPlugin)
        for source_set in project.source_sets:
            project.tasks.configure_task(source_set.compile_java_task_name, _add_apt_options)

    @staticmethod
    def annotation_processor_configuration_name(source_set: SourceSet) -> str:
        return source_set.annotation_processor_configuration_name


def _add_apt_options(task: Task) -> None:
    if task.extensions.find_by_type(AptOptions) is None:
        task.extensions.create("aptOptions", AptOptions)


class EclipseJdt:
    def __init__(self) -> None:
        self.extensions = ExtensionContainer("eclipse.jdt")

    @property
    def apt(self) -> EclipseJdtApt:
        return self.extensions.get_by_name("apt")


class EclipseModel:
    """The ``eclipse`` project extension."""

    def __init__(self) -> None:
        self.jdt = EclipseJdt()
        self.extensions = ExtensionContainer("eclipse")

    @property
    def factorypath(self) -> EclipseFactorypath:
        return self.extensions.get_by_name("factorypath")


class EclipsePlugin:
    """Registers the ``eclipse`` model and the ``eclipse`` / ``cleanEclipse`` lifecycle tasks."""

    def apply(self, project: Project) -> None:
        project.extensions.create("eclipse", EclipseModel)

        def _lifecycle(description: str) -> Callable[[Task], None]:
            def _configure(task: Task) -> None:
                task.description = description
                task.group = IDE_GROUP

            return _configure

        project.tasks.create_task("eclipse", DefaultTask, _lifecycle("Generates all Eclipse files."))
        project.tasks.create_task("cleanEclipse", DefaultTask, _lifecycle("Cleans all Eclipse files."))


def _depends_on(dependency: Task | TaskProvider) -> Callable[[Task], None]:
    def _action(task: Task) -> None:
        task.depends_on(dependency)

    return _action


class AptEclipsePlugin:
    """Generates Eclipse JDT APT preferences and the factorypath from the build configuration."""

    def apply(self, project: Project) -> None:
        project.apply_plugin(AptPlugin)
        project.apply_plugin(EclipsePlugin)
        project.plugins.with_type(JavaPlugin, lambda _plugin: self._configure_eclipse(project))

    def _configure_eclipse(self, project: Project) -> None:
        main_source_set = project.source_sets.get_by_name(MAIN_SOURCE_SET_NAME)
        test_source_set = project.source_sets.get_by_name(TEST_SOURCE_SET_NAME)
        eclipse_model = project.extensions.get_by_type(EclipseModel)
        self._configure_jdt_apt(project, eclipse_model, main_source_set)
        self._configure_factorypath(project, eclipse_model, main_source_set, test_source_set)

    @staticmethod
    def _configure_jdt_apt(project: Project, eclipse_model: EclipseModel, main_source_set: SourceSet) -> None:
        jdt_apt = eclipse_model.jdt.extensions.create(
            "apt", EclipseJdtApt, project, PropertiesFileContentMerger()
        )

        def _main_apt_options() -> AptOptions:
            compile_task = project.tasks.get_by_name(main_source_set.compile_java_task_name)
            return compile_task.extensions.get_by_type(AptOptions)

        jdt_apt.convention_mapping.map("aptEnabled", lambda: _main_apt_options().annotation_processing)
        jdt_apt.convention_mapping.map("genSrcDir", lambda: project.file(DEFAULT_GEN_SRC_DIR))
        jdt_apt.convention_mapping.map("processorOptions", lambda: _main_apt_options().processor_args)

        def _configure(task: GenerateEclipseJdtApt) -> None:
            task.description = "Generates the Eclipse JDT APT settings file."
            task.group = IDE_GROUP
            task.input_file = project.file(JDT_APT_PREFS)
            task.output_file = project.file(JDT_APT_PREFS)
            task.jdt_apt = jdt_apt

        task = project.tasks.create_task("eclipseJdtApt", GenerateEclipseJdtApt, _configure)
        project.tasks.configure_task("eclipse", _depends_on(task))
        clean_task = project.tasks.create_task(
            "cleanEclipseJdtApt", Delete, lambda clean: clean.delete(task)
        )
        project.tasks.configure_task("cleanEclipse", _depends_on(clean_task))
        logger.debug("Configured eclipse.jdt.apt for project '{}'", project.name)

    @staticmethod
    def _configure_factorypath(
        project: Project,
        eclipse_model: EclipseModel,
        main_source_set: SourceSet,
        test_source_set: SourceSet,
    ) -> None:
        factorypath = eclipse_model.extensions.create(
            "factorypath", EclipseFactorypath, XmlFileContentMerger()
        )
        factorypath.plus_configurations = [
            project.configurations.get_by_name(AptPlugin.annotation_processor_configuration_name(main_source_set)),
            project.configurations.get_by_name(AptPlugin.annotation_processor_configuration_name(test_source_set)),
        ]

        def _configure(task: GenerateEclipseFactorypath) -> None:
            task.description = "Generates the Eclipse factorypath file."
            task.group = IDE_GROUP
            task.input_file = project.file(FACTORYPATH)
            task.output_file = project.file(FACTORYPATH)
            task.factorypath = factorypath

        task = project.tasks.create_task("eclipseFactorypath", GenerateEclipseFactorypath, _configure)
        project.tasks.configure_task("eclipse", _depends_on(task))
        clean_task = project.tasks.create_task(
            "cleanEclipseFactorypath", Delete, lambda clean: clean.delete(task)
        )
        project.tasks.configure_task("cleanEclipse", _depends_on(clean_task))
        logger.debug("Configured eclipse.factorypath for project '{}'", project.name)


__all__ = [
    "AptEclipsePlugin",
    "AptPlugin",
    "EclipseJdt",
    "EclipseModel",
    "EclipsePlugin",
    "JavaCompile",
    "JavaPlugin",
]
