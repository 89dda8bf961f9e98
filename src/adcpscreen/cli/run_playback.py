"""Core playback screening execution logic.

This module contains the actual pipeline runner, separated from argument
parsing. Scripts are thin wrappers; this is the real implementation.
"""

import json
import logging
import importlib.util
from pathlib import Path
from typing import Optional, Dict, Any

from adcpscreen.setup_directories import setup_output_directories
from adcpscreen.pipeline.orchestrator import ScreeningOrchestrator
from adcpscreen.schemas import resolve_config, ParamConfig, UserConfig, CLIConfig


logger = logging.getLogger(__name__)


def load_user_config_dict(config_path: str) -> dict:
    """Load user config dict from Python file.

    Returns the raw dict before Pydantic validation.

    Parameters
    ----------
    config_path : str
        Path to user config Python file containing a CONFIG dict.

    Returns
    -------
    dict
        Raw user configuration dictionary.

    Raises
    ------
    FileNotFoundError
        If config file does not exist.
    ValueError
        If no CONFIG dict found in file.
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")

    spec = importlib.util.spec_from_file_location("config_module", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load config module from {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    for name in dir(module):
        if name.startswith('CONFIG'):
            obj = getattr(module, name)
            if isinstance(obj, dict):
                return obj

    raise ValueError(f"No CONFIG dict found in {path}")


def run_playback_pipeline(
    user_config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None,
    max_runtime: Optional[int] = None,
    verbose: bool = False
) -> dict:
    """Screen a recorded ensemble file.

    1. Loads and resolves configuration (Param < User < CLI)
    2. Sets up output directories
    3. Runs the orchestrator until the file is exhausted
    4. Prints and returns the run summary

    Parameters
    ----------
    user_config_path : str, optional
        Path to user config file (Python file with CONFIG dict).
    cli_args : dict, optional
        CLI overrides. Keys: input_file, base_dir, source, pace_seconds,
        log_level. All optional.
    max_runtime : int, optional
        Maximum runtime in minutes.
    verbose : bool, optional
        If True, enable DEBUG logging and print full resolved config.

    Returns
    -------
    dict
        Router, writer and per-configuration counters.

    Raises
    ------
    FileNotFoundError
        If user_config_path does not exist.
    ValueError
        If configuration validation fails or no input file is configured.

    Examples
    --------
    ::

        run_playback_pipeline(
            "scripts/user_config.py",
            cli_args={"input_file": "data/transect_01.jsonl"},
        )
    """
    param_cfg = ParamConfig()

    user_cfg_dict = load_user_config_dict(user_config_path) if user_config_path else {}
    user_cfg = UserConfig.model_validate(user_cfg_dict)

    cli_args = dict(cli_args or {})
    if verbose and "log_level" not in cli_args:
        cli_args["log_level"] = "DEBUG"
    cli_dict = {k: v for k, v in cli_args.items() if v is not None}
    cli_cfg = CLIConfig.model_validate(cli_dict) if cli_dict else CLIConfig()

    config = resolve_config(param_cfg, user_cfg, cli_cfg)

    output_dirs = setup_output_directories(config.base_dir)
    config = config.model_copy(update={"output_dirs": {k: str(v) for k, v in output_dirs.items()}})

    print(f"\n{'='*60}")
    print("ADCP Ensemble Screening")
    print('='*60)
    print(f"Config: {user_config_path or '(defaults)'}")
    print(f"Input:  {config.playback.input_file}")
    print(f"Source: {config.playback.source}")
    print(f"Output: {config.base_dir}")
    print('='*60)

    if verbose:
        print("\nFull Internal Configuration:")
        print(json.dumps(config.model_dump(), indent=2, default=str))
        print('='*60)

    orchestrator = ScreeningOrchestrator(config)
    orchestrator.start(max_runtime=max_runtime)

    summary = orchestrator.get_summary()
    print(f"\n{'='*60}")
    print("Screening complete")
    print('='*60)
    print(f"Received: {summary.get('received', 0)}")
    print(f"Routed:   {summary.get('routed', 0)}")
    print(f"Excluded: {summary.get('excluded', 0)}")
    print(f"Failed:   {summary.get('failed', 0) + summary.get('contract_violations', 0)}")
    print(f"Written:  {summary.get('written', 0)}")
    for entry in summary.get("configurations", []):
        print(f"  {entry['key']}: {entry['processed']} processed, "
              f"{entry['stage_failures']} stage failures")
    print('='*60)

    return summary
