"""CLIConfig: Command-line operational overrides.

Minimal configuration for operational parameters that commonly change
between runs: verbosity, log file, viewport sampling radius.

This schema handles command-line arguments parsed by argparse.
"""

from typing import Literal, Optional
from pydantic import Field
from maplat.schemas.base import MaplatBaseModel


class CLIConfig(MaplatBaseModel):
    """Command-line configuration overrides.

    Highest priority in config resolution.

    Usage
    -----
        cli_cfg = CLIConfig(log_level="DEBUG", base_radius=250)
        internal = resolve_config(param_cfg, user_cfg, cli_cfg)
    """

    log_level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]] = None
    log_file: Optional[str] = None
    base_radius: Optional[float] = Field(None, gt=0)

    def to_internal_overrides(self) -> dict:
        """Convert CLI config to internal config structure.

        Returns
        -------
        dict
            Nested dictionary matching InternalConfig structure
        """
        overrides = {}

        logging_overrides = {}
        if self.log_level is not None:
            logging_overrides["level"] = self.log_level
        if self.log_file is not None:
            logging_overrides["log_file"] = self.log_file
        if logging_overrides:
            overrides["logging"] = logging_overrides

        if self.base_radius is not None:
            overrides["viewport"] = {"base_radius": self.base_radius}

        return overrides
