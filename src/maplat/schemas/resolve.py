"""Merge the configuration layers into one frozen InternalConfig.

resolve_config() is the only place the layers meet. Expert defaults
(ParamConfig) are overridden by the user's settings file (UserConfig),
which is overridden in turn by command-line flags (CLIConfig).
"""

from typing import Union, Optional
from maplat.schemas.param import ParamConfig
from maplat.schemas.user import UserConfig
from maplat.schemas.cli import CLIConfig
from maplat.schemas.internal import InternalConfig


def deep_merge(base: dict, *overrides: dict) -> dict:
    """Recursively merge override dicts onto ``base``.

    Nested dicts merge key by key; any other value in a later dict
    replaces the earlier one. ``base`` is not modified.

    Examples
    --------
    >>> defaults = {"cluster": {"distance": 20.0, "circle_distance_multiplier": 1.0}}
    >>> deep_merge(defaults, {"cluster": {"distance": 40.0}}, {"logging": {"level": "DEBUG"}})
    {'cluster': {'distance': 40.0, 'circle_distance_multiplier': 1.0}, 'logging': {'level': 'DEBUG'}}
    """
    result = base.copy()

    for override in overrides:
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = deep_merge(result[key], value)
            else:
                result[key] = value

    return result


def _as_model(value, model_cls):
    if value is None or (isinstance(value, dict) and not value):
        return model_cls()
    if isinstance(value, model_cls):
        return value
    return model_cls.model_validate(value)


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
    >>> config = resolve_config(ParamConfig(), UserConfig(CLUSTER_DISTANCE=40))
    >>> config.cluster.distance
    40.0
    """
    param = _as_model(param_cfg, ParamConfig)
    user = _as_model(user_cfg, UserConfig)
    cli = _as_model(cli_cfg, CLIConfig)

    merged = deep_merge(
        param.model_dump(),
        user.to_internal_overrides(),
        cli.to_internal_overrides(),
    )

    return InternalConfig.model_validate(merged)
