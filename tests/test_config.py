from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from apt_eclipse.config import ConfigError, create_project, example_config, load_config, save_config
from apt_eclipse.models import AptOptions, UnknownDomainObjectError
from apt_eclipse.plugin import EclipseModel

from .conftest import apt_options


def _write_build_file(path: Path, data: dict) -> Path:
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path


def test_missing_build_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.yml")


def test_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "apt-build.yml"
    path.write_text("project: [unterminated\n")
    with pytest.raises(ConfigError, match="YAML"):
        load_config(path)


def test_main_source_set_is_required(tmp_path: Path) -> None:
    path = _write_build_file(tmp_path / "apt-build.yml", {"project": {"name": "x"}, "source_sets": {"test": {}}})
    with pytest.raises(ConfigError, match="main"):
        load_config(path)


def test_project_name_is_required(tmp_path: Path) -> None:
    path = _write_build_file(tmp_path / "apt-build.yml", {"project": {}})
    with pytest.raises(ConfigError):
        load_config(path)


def test_example_config_survives_save_and_load(tmp_path: Path) -> None:
    path = tmp_path / "apt-build.yml"
    save_config(example_config(), path)
    assert load_config(path) == example_config()


def test_minimal_build_file_gets_main_and_test(tmp_path: Path) -> None:
    path = _write_build_file(tmp_path / "apt-build.yml", {"project": {"name": "minimal"}})
    config = load_config(path)
    assert list(config.source_sets) == ["main", "test"]
    assert config.project.lazy_tasks is True


def test_create_project_from_example(project_dir: Path) -> None:
    project = create_project(example_config(), project_dir)

    assert apt_options(project).processor_args == {"dagger.formatGeneratedSource": "disabled"}
    assert project.source_sets.get_by_name("main").java_dirs == [project_dir / "src" / "main" / "java"]
    project.run(["eclipse"])

    prefs = (project_dir / ".settings" / "org.eclipse.jdt.apt.core.prefs").read_text(encoding="iso-8859-1")
    assert "org.eclipse.jdt.apt.processorOptions=-Adagger.formatGeneratedSource\\=disabled\n" in prefs
    factorypath = (project_dir / ".factorypath").read_text(encoding="utf-8")
    assert factorypath.count(str(project_dir / "libs" / "dagger-compiler.jar")) == 1


def test_create_project_applies_overrides(tmp_path: Path, project_dir: Path) -> None:
    data = {
        "project": {"name": "overrides", "lazy_tasks": False},
        "source_sets": {
            "main": {"annotation_processing": True, "processor_args": {"ignored": "yes"}},
            "test": {"annotation_processing": False},
        },
        "configurations": {
            "annotationProcessor": {"files": ["libs/a.jar"]},
            "tools": {"files": ["libs/tools.jar"]},
        },
        "eclipse": {
            "apt": {
                "enabled": False,
                "reconcile_enabled": False,
                "gen_src_dir": "build/generated/apt",
                "processor_options": {"explicit": "1"},
            },
            "factorypath": {"plus_configurations": ["tools", "annotationProcessor"]},
        },
    }
    project = create_project(load_config(_write_build_file(tmp_path / "apt-build.yml", data)), project_dir)

    eclipse = project.extensions.get_by_type(EclipseModel)
    assert eclipse.jdt.apt.to_properties() == {
        "eclipse.preferences.version": "1",
        "org.eclipse.jdt.core.compiler.processAnnotations": "disabled",
        "org.eclipse.jdt.apt.genSrcDir": "build/generated/apt",
        "org.eclipse.jdt.apt.reconcileEnabled": "false",
        "org.eclipse.jdt.apt.processorOptions": "-Aexplicit=1",
    }
    assert eclipse.factorypath.resolve_paths() == [
        project_dir / "libs" / "tools.jar",
        project_dir / "libs" / "a.jar",
    ]
    test_options = project.tasks.get_by_name("compileTestJava").extensions.get_by_type(AptOptions)
    assert test_options.annotation_processing is False


def test_extra_source_set_gets_compile_task(project_dir: Path) -> None:
    config = example_config()
    config.source_sets["integration"] = config.source_sets["test"].model_copy()

    project = create_project(config, project_dir)

    assert "compileIntegrationJava" in project.tasks
    assert "integrationAnnotationProcessor" in project.configurations


@pytest.mark.parametrize(
    "eclipse_section",
    [
        {"factorypath": {"plus_configurations": ["nope"]}},
        {"factorypath": {"minus_configurations": ["nope"]}},
    ],
)
def test_unknown_configuration_is_reported(project_dir: Path, tmp_path: Path, eclipse_section: dict) -> None:
    path = _write_build_file(tmp_path / "apt-build.yml", {"project": {"name": "x"}, "eclipse": eclipse_section})
    with pytest.raises(UnknownDomainObjectError, match="nope"):
        create_project(load_config(path), project_dir)


def test_unknown_parent_configuration_is_reported(project_dir: Path, tmp_path: Path) -> None:
    data = {"project": {"name": "x"}, "configurations": {"annotationProcessor": {"extends_from": ["nope"]}}}
    path = _write_build_file(tmp_path / "apt-build.yml", data)
    with pytest.raises(UnknownDomainObjectError, match="nope"):
        create_project(load_config(path), project_dir)


def test_circular_configurations_are_rejected(project_dir: Path, tmp_path: Path) -> None:
    data = {
        "project": {"name": "x"},
        "configurations": {
            "a": {"extends_from": ["b"]},
            "b": {"extends_from": ["a"]},
            "annotationProcessor": {"extends_from": ["a"]},
        },
    }
    path = _write_build_file(tmp_path / "apt-build.yml", data)
    with pytest.raises(ConfigError, match="Circular"):
        create_project(load_config(path), project_dir)
