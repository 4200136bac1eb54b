from __future__ import annotations

import os
from pathlib import Path

import typer

from shipcrate import __version__
from shipcrate.cli.commands.ci import ci
from shipcrate.cli.commands.install import install_cargo_release_cmd
from shipcrate.cli.commands.publish import plan, publish
from shipcrate.cli.commands.setup import setup
from shipcrate.cli.commands.trigger import trigger
from shipcrate.cli.commands.version_cmd import version
from shipcrate.cli.context import CONFIG_ENV, WORKSPACE_ENV
from shipcrate.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(trigger)
app.command()(version)
app.command()(setup)
app.command("install-cargo-release")(install_cargo_release_cmd)
app.command()(plan)
app.command()(publish)
app.command()(ci)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    show_version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    workspace: Path | None = typer.Option(
        None,
        "--workspace",
        help="Cargo workspace root (default: current directory).",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (default: <workspace>/shipcrate.toml).",
    ),
) -> None:
    if workspace is not None:
        try:
            root = workspace.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --workspace: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not (root / "Cargo.toml").is_file():
            typer.echo(f"error: --workspace '{root}' has no Cargo.toml", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        os.environ[WORKSPACE_ENV] = str(root)

    if config is not None:
        path = config.expanduser()
        if not path.is_file():
            typer.echo(f"error: --config '{path}' not found", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        os.environ[CONFIG_ENV] = str(path.resolve())


def main() -> None:
    app()
