from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from apt_eclipse.factorypath import Factorypath, FactorypathFormatError, loads
from apt_eclipse.plugin import EclipseModel
from apt_eclipse.project import Project
from apt_eclipse.tasks import TaskExecutionError


def _add_processor_jars(project: Project) -> None:
    project.configurations.get_by_name("annotationProcessor").add_files("libs/a.jar", "libs/b.jar")
    project.configurations.get_by_name("testAnnotationProcessor").add_files("libs/b.jar", "libs/c.jar")


def test_generates_factorypath(project: Project, project_dir: Path, factorypath_file: Path) -> None:
    _add_processor_jars(project)

    project.run(["eclipseFactorypath"])

    expected_entries = "".join(
        f'\t<factorypathentry kind="EXTJAR" id="{project_dir / "libs" / name}" enabled="true" runInBatchMode="false" />\n'
        for name in ("a.jar", "b.jar", "c.jar")
    )
    assert factorypath_file.read_text(encoding="utf-8") == (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        "<factorypath>\n"
        f"{expected_entries}"
        "</factorypath>\n"
    )


def test_empty_factorypath(project: Project, factorypath_file: Path) -> None:
    project.run(["eclipseFactorypath"])
    assert loads(factorypath_file.read_text(encoding="utf-8")).entries == []


def test_generation_is_idempotent(project: Project, factorypath_file: Path) -> None:
    _add_processor_jars(project)
    project.run(["eclipseFactorypath"])
    first = factorypath_file.read_bytes()
    project.run(["eclipseFactorypath"])
    assert factorypath_file.read_bytes() == first


def test_existing_plugin_entries_are_kept(project: Project, project_dir: Path, factorypath_file: Path) -> None:
    factorypath_file.write_text(
        "<factorypath>\n"
        '  <factorypathentry kind="PLUGIN" id="org.eclipse.jst.ws.annotations.core" enabled="true" runInBatchMode="false"/>\n'
        '  <factorypathentry kind="EXTJAR" id="/stale/old.jar" enabled="true" runInBatchMode="false"/>\n'
        "</factorypath>\n",
        encoding="utf-8",
    )
    project.configurations.get_by_name("annotationProcessor").add_files("libs/a.jar")

    project.run(["eclipseFactorypath"])

    factorypath = loads(factorypath_file.read_text(encoding="utf-8"))
    assert [(entry.kind, entry.id) for entry in factorypath.entries] == [
        ("PLUGIN", "org.eclipse.jst.ws.annotations.core"),
        ("EXTJAR", str(project_dir / "libs" / "a.jar")),
    ]


def test_merge_hooks(project: Project, eclipse: EclipseModel, factorypath_file: Path) -> None:
    _add_processor_jars(project)
    seen = []

    def _before(existing: Factorypath) -> None:
        seen.append(len(existing.entries))

    def _when(merged: Factorypath) -> None:
        merged.entries[-1].enabled = False

    def _with_xml(root: ET.Element) -> None:
        for element in root:
            element.set("runInBatchMode", "true")

    eclipse.factorypath.configure_file(lambda merger: merger.before_merged(_before))
    eclipse.factorypath.file.when_merged(_when)
    eclipse.factorypath.file.with_xml(_with_xml)
    project.run(["eclipseFactorypath"])

    entries = loads(factorypath_file.read_text(encoding="utf-8")).entries
    assert seen == [0]
    assert [entry.enabled for entry in entries] == [True, True, False]
    assert all(entry.run_in_batch_mode for entry in entries)


def test_minus_configurations_are_excluded(
    project: Project, eclipse: EclipseModel, project_dir: Path, factorypath_file: Path
) -> None:
    _add_processor_jars(project)
    excluded = project.configurations.create("excluded")
    excluded.add_files("libs/b.jar")
    eclipse.factorypath.minus_configurations = [excluded]

    project.run(["eclipseFactorypath"])

    ids = [entry.id for entry in loads(factorypath_file.read_text(encoding="utf-8")).entries]
    assert ids == [str(project_dir / "libs" / "a.jar"), str(project_dir / "libs" / "c.jar")]


@pytest.mark.parametrize(
    "content",
    [
        "<factorypath><factorypathentry",
        "<classpath></classpath>",
        '<factorypath><factorypathentry kind="EXTJAR"/></factorypath>',
    ],
)
def test_malformed_existing_file_fails_the_task(project: Project, factorypath_file: Path, content: str) -> None:
    factorypath_file.write_text(content, encoding="utf-8")

    with pytest.raises(TaskExecutionError, match="eclipseFactorypath") as excinfo:
        project.run(["eclipseFactorypath"])

    assert isinstance(excinfo.value.cause, FactorypathFormatError)
    assert factorypath_file.read_text(encoding="utf-8") == content
