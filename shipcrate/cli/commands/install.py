from __future__ import annotations

import typer

from shipcrate.cargo.tools import cargo_bin_dir, install_cargo_release
from shipcrate.cli.commands._helpers import fail
from shipcrate.cli.context import build_context
from shipcrate.core.result import Err
from shipcrate.output.console import Style
from shipcrate.platform.detection import detect
from shipcrate.release.timeouts import DOWNLOAD_TIMEOUT_SECONDS
from shipcrate.tools.http import RealHttpClient


def install_cargo_release_cmd(
    version: str | None = typer.Option(
        None, "--version", help="cargo-release version (default: [tools].cargo_release_version)."
    ),
    force: bool = typer.Option(False, "--force", help="Reinstall even if present."),
) -> None:
    """Install the prebuilt cargo-release binary into $CARGO_HOME/bin."""
    ctx = build_context()
    wanted = version or ctx.config.tools.cargo_release_version

    result = install_cargo_release(
        wanted,
        http=RealHttpClient.from_env(ctx.env, timeout=DOWNLOAD_TIMEOUT_SECONDS),
        bin_dir=cargo_bin_dir(ctx.env),
        platform_info=detect(),
        force=force,
    )
    if isinstance(result, Err):
        fail(result.error, ctx.console)

    installed = result.value
    if installed.already_installed:
        ctx.console.print(f"cargo-release: already installed ({installed.path})", Style.DIM)
    else:
        ctx.console.success(f"cargo-release {installed.version} -> {installed.path}")
