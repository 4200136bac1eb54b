"""Build the release command sequence.

The sequence is fixed: checkout, registry login, publish, tag, push.
Optional packages are excluded from the workspace tag/push and handled
in their own steps, whose failures are tolerated: cargo-release reports
"no package selected" for a package that has not changed since its last
release.
"""

from __future__ import annotations

from shipcrate.core.config import Config
from shipcrate.core.result import Err, Ok, Result
from shipcrate.release.errors import ReleaseError
from shipcrate.release.model import ReleasePlan, ReleaseStep

__all__ = [
    "GROUP_CHECKOUT",
    "GROUP_LOGIN",
    "GROUP_PUBLISH",
    "GROUP_PUSH",
    "GROUP_TAG",
    "plan_release",
]

GROUP_CHECKOUT = "Checkout release branch"
GROUP_LOGIN = "Setup auth for crates.io"
GROUP_PUBLISH = "Publishing on crates.io using 'cargo release publish'"
GROUP_TAG = "Tagging release using 'cargo release tag'"
GROUP_PUSH = "Pushing tags to remote using 'cargo release push'"


def _cargo_release(subcommand: str, *, execute: bool) -> list[str]:
    argv = ["cargo", "release", subcommand, "--no-confirm"]
    if execute:
        argv.append("--execute")
    return argv


def plan_release(
    config: Config,
    *,
    version: str,
    token: str | None,
    execute: bool = True,
    checkout: bool = True,
) -> Result[ReleasePlan, ReleaseError]:
    """Plan a release of `version`.

    A dry run (`execute=False`) skips the registry login and lets
    cargo-release report what it would do.
    """
    rel = config.release
    optional = rel.optional_packages
    excludes = [arg for pkg in optional for arg in ("--exclude", pkg)]
    sign = ["--sign-tag"] if rel.sign_tags else []

    steps: list[ReleaseStep] = []

    if checkout:
        steps.append(
            ReleaseStep(
                name=f"checkout {rel.branch}",
                group=GROUP_CHECKOUT,
                argv=("git", "checkout", rel.branch),
            )
        )

    if execute:
        if not token:
            return Err(
                ReleaseError(
                    kind="credentials_missing",
                    message="no registry token",
                    hint="Set CARGO_REGISTRY_TOKEN (or use --dry-run)",
                )
            )
        steps.append(
            ReleaseStep(
                name="login",
                group=GROUP_LOGIN,
                argv=("cargo", "login"),
                stdin_secret=token,
            )
        )

    steps.append(
        ReleaseStep(
            name="publish",
            group=GROUP_PUBLISH,
            argv=tuple(_cargo_release("publish", execute=execute)),
        )
    )

    steps.append(
        ReleaseStep(
            name="tag",
            group=GROUP_TAG,
            argv=(
                *_cargo_release("tag", execute=execute),
                *sign,
                "--tag-prefix",
                rel.tag_prefix,
                *excludes,
            ),
        )
    )
    for pkg in optional:
        steps.append(
            ReleaseStep(
                name=f"tag {pkg}",
                group=GROUP_TAG,
                argv=(*_cargo_release("tag", execute=execute), *sign, "--package", pkg),
                allow_failure=True,
            )
        )

    steps.append(
        ReleaseStep(
            name="push",
            group=GROUP_PUSH,
            argv=(
                *_cargo_release("push", execute=execute),
                "--tag-prefix",
                rel.tag_prefix,
                *excludes,
            ),
        )
    )
    for pkg in optional:
        steps.append(
            ReleaseStep(
                name=f"push {pkg}",
                group=GROUP_PUSH,
                argv=(*_cargo_release("push", execute=execute), "--package", pkg),
                allow_failure=True,
            )
        )

    return Ok(ReleasePlan(version=version, steps=tuple(steps), execute=execute))
