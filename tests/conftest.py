"""Shared fixtures: fake cargo processes so no real toolchain is needed."""

from pathlib import Path
from typing import List, Optional, Sequence

import pytest


class FakeProcess:
    """Stand-in for subprocess.Popen that records kill/wait calls."""

    def __init__(self, args: Sequence[str], log: List[tuple], returncode: int = 0) -> None:
        self.args = list(args)
        self.log = log
        self.returncode: Optional[int] = None
        self._exit_code = returncode
        self.killed = False

    def wait(self, timeout: Optional[float] = None) -> int:
        self.returncode = -9 if self.killed else self._exit_code
        self.log.append(("wait", self))
        return self.returncode

    def kill(self) -> None:
        self.killed = True
        self.log.append(("kill", self))

    @property
    def alive(self) -> bool:
        return self.returncode is None


class FakeCargo:
    """Callable with the lift_cargo signature; `check_status` drives cargo check."""

    def __init__(self) -> None:
        self.log: List[tuple] = []
        self.spawned: List[FakeProcess] = []
        self.check_status = 0

    def __call__(self, project_path, args: Sequence[str]) -> FakeProcess:
        status = self.check_status if args and args[0] == "check" else 0
        proc = FakeProcess(args, self.log, returncode=status)
        self.spawned.append(proc)
        self.log.append(("spawn", proc))
        return proc

    @property
    def runs(self) -> List[FakeProcess]:
        return [p for p in self.spawned if p.args[:1] == ["run"]]

    @property
    def checks(self) -> List[FakeProcess]:
        return [p for p in self.spawned if p.args[:1] == ["check"]]


@pytest.fixture
def cargo() -> FakeCargo:
    return FakeCargo()


@pytest.fixture
def project(tmp_path: Path) -> Path:
    (tmp_path / "Cargo.toml").write_text('[package]\nname = "demo"\n', encoding="utf-8")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.rs").write_text("fn main() {}\n", encoding="utf-8")
    return tmp_path
