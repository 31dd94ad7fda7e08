"""Typer-based CLI for apt-eclipse."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .config import ConfigError, create_project, example_config, load_config, save_config
from .models import UnknownDomainObjectError
from .plugin import EclipseModel
from .project import Project
from .tasks import TaskExecutionError

app = typer.Typer(help="Generate Eclipse annotation processing settings from a build file.")
console = Console()

BUILD_FILE_OPTION = typer.Option(Path("apt-build.yml"), "--build-file", "-b", help="Path to the build file")
PROJECT_DIR_OPTION = typer.Option(
    None, "--project-dir", "-p", help="Project directory (defaults to the build file's directory)"
)


def _configure_logging(level: str, log_file: Path | None) -> None:
    logger.remove()
    logger.add(console.print, level=level, format="{message}")
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level=level)


def _load_project(build_file: Path, project_dir: Optional[Path]) -> Project:
    try:
        config = load_config(build_file)
        return create_project(config, project_dir or build_file.resolve().parent)
    except ConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=4)
    except UnknownDomainObjectError as exc:
        console.print(f"[red]Missing configuration:[/red] {exc}")
        raise typer.Exit(code=3)


@app.command()
def run(
    tasks: List[str] = typer.Argument(..., help="Tasks to run, e.g. eclipse or cleanEclipse"),
    build_file: Path = BUILD_FILE_OPTION,
    project_dir: Optional[Path] = PROJECT_DIR_OPTION,
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write the log to this file"),
) -> None:
    """Run tasks and their dependencies."""

    _configure_logging(log_level.upper(), log_file)
    project = _load_project(build_file, project_dir)
    try:
        executed = project.run(tasks)
    except UnknownDomainObjectError as exc:
        console.print(f"[red]Missing configuration:[/red] {exc}")
        raise typer.Exit(code=3)
    except TaskExecutionError as exc:
        console.print(f"[red]ERROR:[/red] {exc}")
        if isinstance(exc.cause, UnknownDomainObjectError):
            raise typer.Exit(code=3)
        raise typer.Exit(code=1)

    console.print(f"[green]BUILD SUCCESSFUL[/green] ({len(executed)} tasks executed)")


@app.command("tasks")
def list_tasks(
    build_file: Path = BUILD_FILE_OPTION,
    project_dir: Optional[Path] = PROJECT_DIR_OPTION,
) -> None:
    """List the project's tasks."""

    _configure_logging("WARNING", None)
    project = _load_project(build_file, project_dir)
    table = Table(title=f"Tasks of project '{project.name}'")
    table.add_column("Task")
    table.add_column("Group")
    table.add_column("Depends on")
    table.add_column("Description")
    for task in project.tasks:
        depends_on = ", ".join(dependency.name for dependency in task.resolve_dependencies())
        table.add_row(task.name, task.group or "", depends_on, task.description or "")
    console.print(table)


@app.command()
def settings(
    build_file: Path = BUILD_FILE_OPTION,
    project_dir: Optional[Path] = PROJECT_DIR_OPTION,
) -> None:
    """Show the resolved Eclipse APT settings."""

    _configure_logging("WARNING", None)
    project = _load_project(build_file, project_dir)
    eclipse = project.extensions.get_by_type(EclipseModel)
    try:
        apt = eclipse.jdt.apt
        table = Table(title="eclipse.jdt.apt")
        table.add_column("Setting")
        table.add_column("Value")
        table.add_row("aptEnabled", str(apt.apt_enabled).lower())
        table.add_row("reconcileEnabled", str(apt.reconcile_enabled).lower())
        table.add_row("genSrcDir", str(apt.gen_src_dir))
        options = apt.processor_options
        table.add_row("processorOptions", ", ".join(f"{k}={v}" for k, v in options.items()) if options else "")
        console.print(table)

        paths = Table(title="eclipse.factorypath")
        paths.add_column("#", justify="right")
        paths.add_column("Path")
        for index, path in enumerate(eclipse.factorypath.resolve_paths(), start=1):
            paths.add_row(str(index), str(path))
        console.print(paths)
    except UnknownDomainObjectError as exc:
        console.print(f"[red]Missing configuration:[/red] {exc}")
        raise typer.Exit(code=3)


@app.command("init-config")
def init_config(path: Path = typer.Argument(..., writable=True, resolve_path=True)) -> None:
    """Write an example build file to PATH."""

    save_config(example_config(), path)
    console.print(f"[green]Wrote build file to {path}[/green]")


if __name__ == "__main__":
    app()
