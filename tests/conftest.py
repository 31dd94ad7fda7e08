from __future__ import annotations

from pathlib import Path

import pytest

from apt_eclipse.models import AptOptions
from apt_eclipse.plugin import AptEclipsePlugin, EclipseModel
from apt_eclipse.project import Project


def new_project(project_dir: Path, *, lazy: bool = True) -> Project:
    project = Project("demo", project_dir, lazy_tasks=lazy)
    project.apply_plugin(AptEclipsePlugin)
    return project


def apt_options(project: Project, task_name: str = "compileJava") -> AptOptions:
    return project.tasks.get_by_name(task_name).extensions.get_by_type(AptOptions)


@pytest.fixture()
def project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "demo"
    path.mkdir()
    return path.resolve()


@pytest.fixture()
def project(project_dir: Path) -> Project:
    return new_project(project_dir)


@pytest.fixture()
def eclipse(project: Project) -> EclipseModel:
    return project.extensions.get_by_type(EclipseModel)


@pytest.fixture()
def prefs_file(project_dir: Path) -> Path:
    return project_dir / ".settings" / "org.eclipse.jdt.apt.core.prefs"


@pytest.fixture()
def factorypath_file(project_dir: Path) -> Path:
    return project_dir / ".factorypath"
