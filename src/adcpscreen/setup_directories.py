"""
Directory setup for the screening pipeline.

Layout under the base directory:
- corrected/: screened ensembles (JSONL), named after the input file
- options/: per-configuration options database
- logs/: pipeline logs
"""

from pathlib import Path
from datetime import datetime, timezone
from typing import Optional


def setup_output_directories(base_output_dir=None):
    """
    Set up the output directory structure.

    Parameters
    ----------
    base_output_dir : str or Path, optional
        Base output directory. If None, ``./output`` in the current directory.

    Returns
    -------
    dict
        Dictionary with paths: 'base', 'corrected', 'options', 'logs'
    """
    if base_output_dir is None:
        base_output_dir = Path.cwd() / "output"

    base_output_dir = Path(base_output_dir).expanduser().resolve()

    directories = {
        "base": base_output_dir,
        "corrected": base_output_dir / "corrected",
        "options": base_output_dir / "options",
        "logs": base_output_dir / "logs",
    }

    for path in directories.values():
        path.mkdir(parents=True, exist_ok=True)

    return directories


def get_corrected_path(output_dirs, input_file: Optional[str], suffix: str = "_screened"):
    """
    Path of the corrected output for an input file.

    Example
    -------
    >>> get_corrected_path(dirs, "data/transect_01.jsonl")
    Path('output/corrected/transect_01_screened.jsonl')
    """
    stem = Path(input_file).stem if input_file else "stream"
    corrected_dir = Path(output_dirs["corrected"])
    corrected_dir.mkdir(parents=True, exist_ok=True)
    return corrected_dir / f"{stem}{suffix}.jsonl"


def get_log_path(output_dirs, input_file: Optional[str] = None):
    """
    Timestamped log file path.

    Returns
    -------
    Path
        logs/screen_<input stem>_<YYYYmmdd_HHMMSS>.log
    """
    log_dir = Path(output_dirs["logs"])
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    stem = Path(input_file).stem if input_file else "latest"
    return log_dir / f"screen_{stem}_{timestamp}.log"
