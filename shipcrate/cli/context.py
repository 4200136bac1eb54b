from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import typer

from shipcrate.core.config import CONFIG_FILENAME, Config, ReleaseSecrets, load_config_or_default
from shipcrate.core.errors import ErrorCode
from shipcrate.core.result import Err
from shipcrate.output.console import ConsoleProtocol, RichConsole

WORKSPACE_ENV = "SHIPCRATE_WORKSPACE"
CONFIG_ENV = "SHIPCRATE_CONFIG"


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace_root: Path
    config: Config
    secrets: ReleaseSecrets
    env: dict[str, str]
    console: ConsoleProtocol


def build_context(console: ConsoleProtocol | None = None) -> CLIContext:
    out = console or RichConsole()
    env = dict(os.environ)

    root = Path(env.get(WORKSPACE_ENV) or Path.cwd())
    config_path = Path(env[CONFIG_ENV]) if env.get(CONFIG_ENV) else root / CONFIG_FILENAME

    config_result = load_config_or_default(config_path)
    if isinstance(config_result, Err):
        out.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(
        workspace_root=root,
        config=config_result.value,
        secrets=ReleaseSecrets.from_env(env),
        env=env,
        console=out,
    )
