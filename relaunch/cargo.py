import os
import subprocess
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Sequence, Union

import typer

from .config import CARGO, ENV_FILTER_PREFIX

Launch = Callable[[Union[str, Path], Sequence[str]], "subprocess.Popen[bytes]"]


class BuildCheckError(RuntimeError):
    """`cargo check` exited with a non-zero status."""


def clean_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    if environ is None:
        environ = os.environ
    return {
        key: value
        for key, value in environ.items()
        if not key.startswith(ENV_FILTER_PREFIX)
    }


def lift_cargo(project_path: Union[str, Path], args: Sequence[str]) -> "subprocess.Popen[bytes]":
    """Start `cargo <args>` in the project directory.

    stdio is inherited so cargo's own diagnostics reach the terminal. Failing
    to spawn is fatal and raised as RuntimeError.
    """
    typer.echo(f"⚙ Running cargo {' '.join(args)}")
    try:
        return subprocess.Popen(
            [CARGO, *args], cwd=str(project_path), env=clean_env()
        )
    except OSError as e:
        raise RuntimeError(f"Error creating process: {e}") from e


def relaunch_cargo(
    project_path: Union[str, Path],
    cargo_args: Sequence[str],
    launch: Launch = lift_cargo,
) -> "subprocess.Popen[bytes]":
    return launch(project_path, ["run", *cargo_args])


def static_fire(
    project_path: Union[str, Path],
    cargo_args: Sequence[str] = (),
    launch: Launch = lift_cargo,
) -> None:
    """Run `cargo check` to completion; raise BuildCheckError if it fails."""
    status = launch(project_path, ["check", *cargo_args]).wait()
    typer.echo("⚙ Done (cargo check)")
    if status != 0:
        raise BuildCheckError("Error during cargo check")
