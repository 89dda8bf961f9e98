"""Configuration resolution and merging logic.

This module provides the single entrypoint for configuration resolution:
resolve_config(). It merges ParamConfig, UserConfig, and CLIConfig in
the correct precedence order and returns a validated InternalConfig.

Precedence (highest to lowest):
1. CLIConfig (command-line overrides)
2. UserConfig (user file)
3. ParamConfig (expert defaults)
"""

from typing import Optional, Union

from adcpscreen.schemas.cli import CLIConfig
from adcpscreen.schemas.internal import InternalConfig
from adcpscreen.schemas.param import ParamConfig
from adcpscreen.schemas.user import UserConfig


def deep_merge(base: dict, *overrides: dict) -> dict:
    """Deep merge multiple dictionaries.

    Later dictionaries override earlier ones. Nested dictionaries are
    merged recursively; other values are replaced.

    Examples
    --------
    >>> base = {"a": 1, "b": {"c": 2, "d": 3}}
    >>> override = {"b": {"d": 4, "e": 5}, "f": 6}
    >>> deep_merge(base, override)
    {'a': 1, 'b': {'c': 2, 'd': 4, 'e': 5}, 'f': 6}
    """
    result = base.copy()

    for override in overrides:
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = deep_merge(result[key], value)
            else:
                result[key] = value

    return result


def _as_model(cfg, model_cls):
    if cfg is None or (isinstance(cfg, dict) and not cfg):
        return model_cls()
    if isinstance(cfg, model_cls):
        return cfg
    return model_cls.model_validate(cfg)


def resolve_config(
    param_cfg: Union[dict, ParamConfig],
    user_cfg: Optional[Union[dict, UserConfig]] = None,
    cli_cfg: Optional[Union[dict, CLIConfig]] = None,
) -> InternalConfig:
    """Resolve final runtime configuration from param, user, and CLI configs.

    Parameters
    ----------
    param_cfg : dict or ParamConfig
        Expert configuration with complete defaults. Required.
    user_cfg : dict or UserConfig, optional
        User configuration with overrides.
    cli_cfg : dict or CLIConfig, optional
        Command-line overrides.

    Returns
    -------
    InternalConfig
        Fully validated, immutable runtime configuration

    Raises
    ------
    ValidationError
        If any config fails Pydantic validation

    Examples
    --------
    >>> user = UserConfig(remove_ship_speed=False, bt_snr_thresh=12)
    >>> config = resolve_config(ParamConfig(), user)
    >>> config.screening.remove_ship_speed
    False
    >>> config.screening.bt_snr_thresh
    12.0
    """
    param = _as_model(param_cfg, ParamConfig)
    user = _as_model(user_cfg, UserConfig)
    cli = _as_model(cli_cfg, CLIConfig)

    param_dict = param.model_dump()
    merged = deep_merge(param_dict, user.to_internal_overrides(), cli.to_internal_overrides())

    return InternalConfig.model_validate(merged)
