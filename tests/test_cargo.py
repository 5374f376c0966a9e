import pytest

from relaunch import cargo as cargo_mod
from relaunch.cargo import BuildCheckError, clean_env, lift_cargo, relaunch_cargo, static_fire


def test_clean_env_drops_rustup_variables():
    env = {
        "PATH": "/usr/bin",
        "RUSTUP_TOOLCHAIN": "nightly",
        "RUSTUP_HOME": "/home/dev/.rustup",
        "CARGO_HOME": "/home/dev/.cargo",
    }
    assert clean_env(env) == {"PATH": "/usr/bin", "CARGO_HOME": "/home/dev/.cargo"}


def test_clean_env_defaults_to_process_environment(monkeypatch):
    monkeypatch.setenv("RUSTUP_TOOLCHAIN", "stable")
    monkeypatch.setenv("RELAUNCH_TEST_VAR", "1")
    env = clean_env()
    assert "RUSTUP_TOOLCHAIN" not in env
    assert env["RELAUNCH_TEST_VAR"] == "1"


def test_lift_cargo_spawns_in_project_dir(monkeypatch, tmp_path, capsys):
    calls = []

    def fake_popen(argv, **kwargs):
        calls.append((argv, kwargs))
        return "handle"

    monkeypatch.setenv("RUSTUP_TOOLCHAIN", "stable")
    monkeypatch.setattr(cargo_mod.subprocess, "Popen", fake_popen)

    assert lift_cargo(tmp_path, ["run", "--release"]) == "handle"
    ((argv, kwargs),) = calls
    assert argv == ["cargo", "run", "--release"]
    assert kwargs["cwd"] == str(tmp_path)
    assert "RUSTUP_TOOLCHAIN" not in kwargs["env"]
    assert "⚙ Running cargo run --release" in capsys.readouterr().out


def test_lift_cargo_spawn_failure_is_fatal(monkeypatch, tmp_path):
    def fake_popen(argv, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", "cargo")

    monkeypatch.setattr(cargo_mod.subprocess, "Popen", fake_popen)
    with pytest.raises(RuntimeError, match="Error creating process"):
        lift_cargo(tmp_path, ["check"])


def test_relaunch_cargo_runs_with_forwarded_args(cargo, tmp_path):
    proc = relaunch_cargo(tmp_path, ["--bin", "app"], launch=cargo)
    assert proc.args == ["run", "--bin", "app"]


def test_static_fire_passes_on_success(cargo, tmp_path, capsys):
    static_fire(tmp_path, ["--release"], launch=cargo)
    (check,) = cargo.checks
    assert check.args == ["check", "--release"]
    assert check.returncode == 0
    assert "⚙ Done (cargo check)" in capsys.readouterr().out


def test_static_fire_raises_on_failure(cargo, tmp_path):
    cargo.check_status = 101
    with pytest.raises(BuildCheckError, match="Error during cargo check"):
        static_fire(tmp_path, launch=cargo)
    assert cargo.runs == []
