"""Build file loading and project creation for apt-eclipse."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .models import MAIN_SOURCE_SET_NAME, TEST_SOURCE_SET_NAME, AptOptions
from .plugin import AptEclipsePlugin, EclipseModel
from .project import Project


class ProjectConfig(BaseModel):
    """Project level metadata."""

    name: str
    lazy_tasks: bool = Field(
        default=True,
        description="Register tasks lazily instead of creating them up front.",
    )


class SourceSetConfig(BaseModel):
    """A source set and the annotation processing options of its compile task."""

    java_dirs: List[str] = Field(default_factory=list)
    annotation_processing: bool = True
    processor_args: Dict[str, Any] = Field(default_factory=dict)


class ConfigurationConfig(BaseModel):
    """A classpath configuration listing local artifacts."""

    files: List[str] = Field(default_factory=list)
    extends_from: List[str] = Field(default_factory=list)


class JdtAptConfig(BaseModel):
    """Explicit ``eclipse.jdt.apt`` values; unset fields keep their conventions."""

    enabled: Optional[bool] = None
    reconcile_enabled: Optional[bool] = None
    gen_src_dir: Optional[str] = None
    processor_options: Optional[Dict[str, Any]] = None


class FactorypathConfig(BaseModel):
    plus_configurations: Optional[List[str]] = None
    minus_configurations: List[str] = Field(default_factory=list)


class EclipseConfig(BaseModel):
    apt: JdtAptConfig = Field(default_factory=JdtAptConfig)
    factorypath: FactorypathConfig = Field(default_factory=FactorypathConfig)


def _default_source_sets() -> Dict[str, SourceSetConfig]:
    return {
        MAIN_SOURCE_SET_NAME: SourceSetConfig(),
        TEST_SOURCE_SET_NAME: SourceSetConfig(),
    }


class BuildConfig(BaseModel):
    """Top-level build file."""

    project: ProjectConfig
    source_sets: Dict[str, SourceSetConfig] = Field(default_factory=_default_source_sets)
    configurations: Dict[str, ConfigurationConfig] = Field(default_factory=dict)
    eclipse: EclipseConfig = Field(default_factory=EclipseConfig)

    @field_validator("source_sets")
    @classmethod
    def _ensure_main_source_set(cls, value: Dict[str, SourceSetConfig]) -> Dict[str, SourceSetConfig]:
        if MAIN_SOURCE_SET_NAME not in value:
            raise ValueError("The 'main' source set must be configured")
        return value


class ConfigError(Exception):
    """Raised when a build file is invalid."""


def load_config(path: Path) -> BuildConfig:
    """Load a build file from YAML."""

    try:
        data = yaml.safe_load(path.read_text())
    except FileNotFoundError as exc:
        raise ConfigError(f"Build file not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML: {exc}") from exc

    try:
        return BuildConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid build file: {exc}") from exc


def save_config(config: BuildConfig, path: Path) -> None:
    """Persist a build file to disk as YAML."""

    rendered = config.model_dump()
    path.write_text(yaml.safe_dump(rendered, sort_keys=False))


def create_project(config: BuildConfig, project_dir: Path) -> Project:
    """Create the project described by ``config`` with the APT Eclipse plugin applied.

    Build file values are applied after the plugin, so conventions read them
    when the generators run.
    Circular `extends_from` chains raise :class:`ConfigError`.
    """

    project = Project(config.project.name, project_dir, lazy_tasks=config.project.lazy_tasks)
    for name, source_set_config in config.source_sets.items():
        source_set = project.source_sets.maybe_create(name)
        source_set.java_dirs.extend(project.file(path) for path in source_set_config.java_dirs)

    project.apply_plugin(AptEclipsePlugin)

    for name, configuration_config in config.configurations.items():
        configuration = project.configurations.maybe_create(name)
        configuration.add_files(*configuration_config.files)
    for name, configuration_config in config.configurations.items():
        configuration = project.configurations.get_by_name(name)
        configuration.extend(*(project.configurations.get_by_name(parent) for parent in configuration_config.extends_from))
    for configuration in project.configurations:
        try:
            configuration.resolve()
        except ValueError as exc:
            raise ConfigError(f"Invalid configuration '{configuration.name}': {exc}") from exc

    for name, source_set_config in config.source_sets.items():
        source_set = project.source_sets.get_by_name(name)

        def _apply_options(task, options=source_set_config) -> None:
            apt_options = task.extensions.get_by_type(AptOptions)
            apt_options.annotation_processing = options.annotation_processing
            apt_options.processor_args.update(options.processor_args)

        project.tasks.configure_task(source_set.compile_java_task_name, _apply_options)

    eclipse = project.extensions.get_by_type(EclipseModel)
    apt = config.eclipse.apt
    if apt.enabled is not None:
        eclipse.jdt.apt.apt_enabled = apt.enabled
    if apt.reconcile_enabled is not None:
        eclipse.jdt.apt.reconcile_enabled = apt.reconcile_enabled
    if apt.gen_src_dir is not None:
        eclipse.jdt.apt.gen_src_dir = apt.gen_src_dir
    if apt.processor_options is not None:
        eclipse.jdt.apt.processor_options = apt.processor_options

    factorypath = config.eclipse.factorypath
    if factorypath.plus_configurations is not None:
        eclipse.factorypath.plus_configurations = [
            project.configurations.get_by_name(name) for name in factorypath.plus_configurations
        ]
    eclipse.factorypath.minus_configurations = [
        project.configurations.get_by_name(name) for name in factorypath.minus_configurations
    ]
    return project


def example_config() -> BuildConfig:
    return BuildConfig(
        project=ProjectConfig(name="example"),
        source_sets={
            MAIN_SOURCE_SET_NAME: SourceSetConfig(
                java_dirs=["src/main/java"],
                processor_args={"dagger.formatGeneratedSource": "disabled"},
            ),
            TEST_SOURCE_SET_NAME: SourceSetConfig(java_dirs=["src/test/java"]),
        },
        configurations={
            "annotationProcessor": ConfigurationConfig(files=["libs/dagger-compiler.jar"]),
            "testAnnotationProcessor": ConfigurationConfig(extends_from=["annotationProcessor"]),
        },
    )


__all__ = [
    "BuildConfig",
    "ConfigError",
    "ConfigurationConfig",
    "EclipseConfig",
    "FactorypathConfig",
    "JdtAptConfig",
    "ProjectConfig",
    "SourceSetConfig",
    "create_project",
    "example_config",
    "load_config",
    "save_config",
]
