import queue
import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional, Sequence

import typer
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from .cargo import BuildCheckError, Launch, lift_cargo, relaunch_cargo, static_fire
from .config import LaunchConfig
from .handlers import ChangeHandler, Debouncer, DebouncedEvent, EventKind
from .utils import should_trigger

Check = Callable[..., None]


class WatchLoop:
    """Keep one `cargo run` alive and restart it after validated changes."""

    def __init__(
        self,
        project_path: Path,
        cargo_args: Sequence[str],
        events: "queue.Queue[DebouncedEvent]",
        launch: Launch = lift_cargo,
        check: Check = static_fire,
    ) -> None:
        self.project_path = project_path
        self.cargo_args = list(cargo_args)
        self.events = events
        self.launch = launch
        self.check = check
        self.process: Optional["subprocess.Popen[bytes]"] = None
        self.launched = 0

    def _launch_run(self) -> "subprocess.Popen[bytes]":
        process = relaunch_cargo(self.project_path, self.cargo_args, launch=self.launch)
        self.launched += 1
        return process

    def start(self) -> None:
        self.process = self._launch_run()

    def restart(self) -> None:
        if self.process is not None:
            try:
                self.process.kill()
                self.process.wait()
            except OSError as e:
                raise RuntimeError(f"Error terminating cargo: {e}") from e
            typer.echo("⚙ Stopped (cargo run)")
        self.process = self._launch_run()

    def handle(self, event: DebouncedEvent) -> bool:
        """Process one event; returns True if cargo run was restarted."""
        if event.kind is EventKind.ERROR:
            logging.error(f"watch error: {event.error!r}")
            return False
        if not should_trigger(event):
            logging.debug(f"Ignoring {event.kind.value} {' -> '.join(event.paths)}")
            return False

        logging.info(f"Change detected: {event.kind.value} {' -> '.join(event.paths)}")
        try:
            self.check(self.project_path, self.cargo_args, launch=self.launch)
        except BuildCheckError as e:
            logging.warning(f"{e}; keeping the running process")
            return False
        self.restart()
        return True

    def run_forever(self) -> None:
        while True:
            self.handle(self.events.get())


def watch(config: LaunchConfig) -> None:
    """Watch the project and relaunch cargo until interrupted."""
    events: "queue.Queue[DebouncedEvent]" = queue.Queue()
    debouncer = Debouncer(events, config.interval, notices=config.notices)
    handler = ChangeHandler(debouncer)

    observer = PollingObserver() if config.use_polling else Observer()
    try:
        observer.schedule(handler, str(config.project_path), recursive=True)
        observer.start()
    except OSError as e:
        raise RuntimeError(f"Error watching path: {e}") from e

    logging.info(f"Watching: {config.project_path}")
    logging.info(f"Observer: {'Polling' if config.use_polling else 'Native'}")
    logging.info(f"Debounce interval: {config.interval}s")

    debouncer.start()
    loop = WatchLoop(config.project_path, config.cargo_args, events)
    loop.start()

    try:
        loop.run_forever()
    except KeyboardInterrupt:
        logging.info("Stopping watcher...")
    finally:
        observer.stop()
        observer.join()
        debouncer.stop()
