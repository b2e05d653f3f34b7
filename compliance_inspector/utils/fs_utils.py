from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Tuple


def ensure_dirs_exist(dirs: Iterable[Path]) -> None:
    """
    Ensure each path in `dirs` exists, creating missing directories.

    Args:
        dirs (Iterable[Path]): A list or iterable of Path objects.
    """
    for directory in dirs:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RuntimeError(f"Failed to create directory '{directory}': {e}") from e


def create_run_directory(output_root: Path, timestamp: Optional[str] = None) -> Tuple[Path, str]:
    """
    Creates a timestamped run directory under the output root. Runs started
    within the same second get a numeric suffix instead of sharing a folder.

    Returns:
        Tuple[Path, str]: (Path to run directory, run name)
    """
    timestamp = timestamp or datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
    ensure_dirs_exist([output_root])

    name = timestamp
    counter = 1
    while True:
        run_dir = output_root / name
        try:
            run_dir.mkdir()
            return run_dir, name
        except FileExistsError:
            counter += 1
            name = f"{timestamp}_{counter}"
