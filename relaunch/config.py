from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

# Files with those extensions trigger a relaunch
WHITELISTED_EXTENSIONS: Tuple[str, ...] = (
    ".rs",  # Rust source file
    ".toml",  # TOML files (e.g. Cargo.toml)
    ".tera",  # Tera templates
    ".hbs",  # Handlebars templates
    ".html",  # HTML files
    ".js",  # JavaScript files
)

# Default quiet period before a burst of changes is delivered (in seconds)
DEFAULT_CHECK_INTERVAL = 0.5

CARGO = "cargo"

# rustup variables leak the toolchain of an outer `cargo run` into ours
ENV_FILTER_PREFIX = "RUSTUP"


@dataclass(frozen=True)
class LaunchConfig:
    project_path: Path
    interval: float = DEFAULT_CHECK_INTERVAL
    cargo_args: Tuple[str, ...] = ()
    use_polling: bool = False
    notices: bool = False
