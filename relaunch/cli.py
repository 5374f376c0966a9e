import logging
from pathlib import Path
from typing import List, Optional

import typer

from .cargo import BuildCheckError, static_fire
from .config import DEFAULT_CHECK_INTERVAL, LaunchConfig
from .loop import watch
from .utils import is_existing_dir, parse_interval, split_cargo_args


app = typer.Typer(add_completion=False)


@app.command()
def main(
    project: Optional[Path] = typer.Argument(
        None,
        help="Path to your project (default: current directory)",
        show_default=False,
    ),
    cargo_args: Optional[List[str]] = typer.Argument(
        None,
        help="Cargo arguments (usage: <launcher-args> -- <cargo-args>)",
        show_default=False,
    ),
    interval: Optional[str] = typer.Option(
        None,
        "--interval",
        "-i",
        metavar="SECONDS",
        help=f"Interval to check for filesystem changes [default: {DEFAULT_CHECK_INTERVAL}]",
        envvar="RELAUNCH_INTERVAL",
    ),
    use_polling: Optional[bool] = typer.Option(
        None, "--poll/--no-poll", help="Force polling observer (auto if under /mnt)"
    ),
    notices: bool = typer.Option(
        False,
        "--notices/--no-notices",
        help="Also react to immediate write/remove notices before the debounce settles",
    ),
    loglevel: str = typer.Option(
        "INFO", "--loglevel", help="Logging level: DEBUG, INFO, WARNING, ERROR"
    ),
):
    """Watch your Cargo project for changes and relaunch Cargo when changes are detected.

    - Only changes to .rs, .toml, .tera, .hbs, .html and .js files count.
    - Every change is validated with `cargo check` first; a failing check keeps the current `cargo run` alive.
    """
    # Logging
    logging.basicConfig(
        level=getattr(logging, loglevel.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )

    if project is None:
        project = Path.cwd()

    if interval is None:
        seconds = DEFAULT_CHECK_INTERVAL
    else:
        try:
            seconds = parse_interval(interval)
        except ValueError:
            typer.echo(f"Invalid interval: {interval}", err=True)
            raise typer.Exit(code=1)

    project = project.expanduser()
    if not is_existing_dir(project):
        typer.echo(f'"{project}" is not a valid directory', err=True)
        raise typer.Exit(code=1)
    project = project.resolve()

    # Auto-poll under /mnt to avoid inotify issues
    if use_polling is None:
        use_polling = str(project).startswith("/mnt/")

    config = LaunchConfig(
        project_path=project,
        interval=seconds,
        cargo_args=tuple(split_cargo_args(cargo_args)),
        use_polling=use_polling,
        notices=notices,
    )

    try:
        static_fire(config.project_path, config.cargo_args)
    except BuildCheckError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)

    watch(config)


if __name__ == "__main__":
    app()
