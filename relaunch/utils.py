import os
import math
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .config import WHITELISTED_EXTENSIONS
from .handlers import DebouncedEvent, EventKind

PathArg = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]

SINGLE_PATH_KINDS = frozenset(
    {
        EventKind.NOTICE_WRITE,
        EventKind.NOTICE_REMOVE,
        EventKind.CREATE,
        EventKind.WRITE,
        EventKind.CHMOD,
        EventKind.REMOVE,
    }
)


def is_whitelisted(path: Optional[PathArg]) -> bool:
    """True if the path ends with one of the whitelisted extensions.

    Paths that cannot be represented as UTF-8 never match.
    """
    if path is None:
        return False
    try:
        path_str = os.fsdecode(path)
        path_str.encode("utf-8")
    except (TypeError, UnicodeError):
        return False
    return path_str.endswith(WHITELISTED_EXTENSIONS)


def should_trigger(event: DebouncedEvent) -> bool:
    if event.kind in SINGLE_PATH_KINDS:
        return is_whitelisted(event.path)
    if event.kind is EventKind.RENAME:
        return is_whitelisted(event.path) or is_whitelisted(event.dest_path)
    return False


def is_existing_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError:
        return False


def parse_interval(text: str) -> float:
    interval = float(text)
    if math.isnan(interval) or math.isinf(interval) or interval < 0:
        raise ValueError(f"interval out of range: {text}")
    return interval


def split_cargo_args(args: Optional[Iterable[str]]) -> List[str]:
    """Flatten forwarded arguments.

    A single argument is split on whitespace, so `-- "--release --bin app"`
    and `-- --release --bin app` produce the same argv. Several arguments are
    passed through untouched, keeping anything the shell already grouped.
    """
    forwarded = list(args or ())
    if len(forwarded) == 1:
        return forwarded[0].split()
    return forwarded
