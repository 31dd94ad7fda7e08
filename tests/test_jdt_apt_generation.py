from __future__ import annotations

from pathlib import Path

import pytest

from apt_eclipse.plugin import EclipseModel
from apt_eclipse.project import Project
from apt_eclipse.properties import PropertiesFormatError
from apt_eclipse.tasks import TaskExecutionError

from .conftest import apt_options


def test_generates_preferences(project: Project, prefs_file: Path) -> None:
    apt_options(project).processor_args["foo"] = "bar"

    project.run(["eclipseJdtApt"])

    assert prefs_file.read_text(encoding="iso-8859-1") == (
        "eclipse.preferences.version=1\n"
        "org.eclipse.jdt.core.compiler.processAnnotations=enabled\n"
        "org.eclipse.jdt.apt.genSrcDir=.apt_generated\n"
        "org.eclipse.jdt.apt.reconcileEnabled=true\n"
        "org.eclipse.jdt.apt.processorOptions=-Afoo\\=bar\n"
    )


def test_generation_is_idempotent(project: Project, prefs_file: Path) -> None:
    apt_options(project).processor_args.update({"a": "1", "b": None})
    project.run(["eclipseJdtApt"])
    first = prefs_file.read_bytes()
    project.run(["eclipseJdtApt"])
    assert prefs_file.read_bytes() == first


def test_unrelated_keys_are_preserved(project: Project, prefs_file: Path) -> None:
    prefs_file.parent.mkdir(parents=True)
    prefs_file.write_text(
        "foo=bar\norg.eclipse.jdt.core.compiler.processAnnotations=disabled\nzzz=last\n",
        encoding="iso-8859-1",
    )

    project.run(["eclipseJdtApt"])

    lines = prefs_file.read_text(encoding="iso-8859-1").splitlines()
    assert lines == [
        "eclipse.preferences.version=1",
        "org.eclipse.jdt.core.compiler.processAnnotations=enabled",
        "org.eclipse.jdt.apt.genSrcDir=.apt_generated",
        "org.eclipse.jdt.apt.reconcileEnabled=true",
        "foo=bar",
        "zzz=last",
    ]


def test_toggling_enabled_changes_only_process_annotations(
    project: Project, eclipse: EclipseModel, prefs_file: Path
) -> None:
    apt_options(project).processor_args["foo"] = "bar"
    project.run(["eclipseJdtApt"])
    before = prefs_file.read_text(encoding="iso-8859-1").splitlines()

    eclipse.jdt.apt.apt_enabled = False
    project.run(["eclipseJdtApt"])
    after = prefs_file.read_text(encoding="iso-8859-1").splitlines()

    changed = [(old, new) for old, new in zip(before, after) if old != new]
    assert len(before) == len(after)
    assert changed == [
        (
            "org.eclipse.jdt.core.compiler.processAnnotations=enabled",
            "org.eclipse.jdt.core.compiler.processAnnotations=disabled",
        )
    ]


def test_stale_processor_options_are_removed(
    project: Project, eclipse: EclipseModel, prefs_file: Path
) -> None:
    apt_options(project).processor_args["foo"] = "bar"
    project.run(["eclipseJdtApt"])
    assert "processorOptions" in prefs_file.read_text(encoding="iso-8859-1")

    eclipse.jdt.apt.processor_options = None
    project.run(["eclipseJdtApt"])
    assert "processorOptions" not in prefs_file.read_text(encoding="iso-8859-1")


def test_merge_hooks(project: Project, eclipse: EclipseModel, prefs_file: Path) -> None:
    prefs_file.parent.mkdir(parents=True)
    prefs_file.write_text("obsolete=1\nkept=2\n", encoding="iso-8859-1")
    seen = {}

    def _before(properties: dict) -> None:
        seen.update(properties)
        properties.pop("obsolete")

    def _when(properties: dict) -> None:
        properties["org.eclipse.jdt.apt.reconcileEnabled"] = "false"

    eclipse.jdt.apt.configure_file(lambda merger: merger.before_merged(_before))
    eclipse.jdt.apt.file.when_merged(_when)
    project.run(["eclipseJdtApt"])

    content = prefs_file.read_text(encoding="iso-8859-1")
    assert seen == {"obsolete": "1", "kept": "2"}
    assert "obsolete" not in content
    assert "kept=2" in content
    assert "org.eclipse.jdt.apt.reconcileEnabled=false" in content


def test_malformed_existing_file_fails_the_task(project: Project, prefs_file: Path) -> None:
    prefs_file.parent.mkdir(parents=True)
    prefs_file.write_text("broken=\\uZZZZ\n", encoding="iso-8859-1")

    with pytest.raises(TaskExecutionError, match="eclipseJdtApt") as excinfo:
        project.run(["eclipseJdtApt"])

    assert isinstance(excinfo.value.cause, PropertiesFormatError)
    assert prefs_file.read_text(encoding="iso-8859-1") == "broken=\\uZZZZ\n"


def test_io_failure_fails_the_task(project: Project, prefs_file: Path) -> None:
    prefs_file.mkdir(parents=True)

    with pytest.raises(TaskExecutionError, match="eclipseJdtApt") as excinfo:
        project.run(["eclipseJdtApt"])

    assert isinstance(excinfo.value.cause, OSError)
