"""Machine configuration backed by OmegaConf structured configs."""

import dataclasses
from typing import Any, Dict, List, Optional, Union

from omegaconf import OmegaConf

from chip8vm.constants import DEFAULT_TICKS_PER_FRAME, TIMER_HZ


@dataclasses.dataclass
class MachineConfig:
    """Settings for a ``Chip8`` machine.

    Attributes:
        seed: Seed of the PRNG key feeding CXNN
        shift_uses_vy: Make 8XY6/8XYE shift VY into VX instead of shifting VX
        ticks_per_frame: CPU ticks executed by ``Chip8.run_frame`` per timer tick
        timer_hz: Rate at which the host is expected to advance the timers
        log_level: Console logger level ("DEBUG", "INFO", "WARNING", ...)
    """
    seed: int = 0
    shift_uses_vy: bool = False
    ticks_per_frame: int = DEFAULT_TICKS_PER_FRAME
    timer_hz: int = TIMER_HZ
    log_level: str = "INFO"


def load_config(
    path: Optional[str] = None,
    overrides: Optional[Union[List[str], Dict[str, Any]]] = None,
) -> MachineConfig:
    """Build a ``MachineConfig`` from defaults, an optional YAML file and overrides.

    Args:
        path: YAML file whose keys override the defaults
        overrides: Dotlist (``["seed=3"]``) or mapping applied last

    Returns:
        Validated ``MachineConfig`` instance

    Raises:
        ValueError: if ``ticks_per_frame`` or ``timer_hz`` is not positive
    """
    cfg = OmegaConf.structured(MachineConfig)
    if path is not None:
        cfg = OmegaConf.merge(cfg, OmegaConf.load(path))
    if overrides:
        if isinstance(overrides, dict):
            cfg = OmegaConf.merge(cfg, OmegaConf.create(overrides))
        else:
            cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(overrides)))

    config: MachineConfig = OmegaConf.to_object(cfg)
    if config.ticks_per_frame <= 0:
        raise ValueError(f"ticks_per_frame must be positive, got {config.ticks_per_frame}")
    if config.timer_hz <= 0:
        raise ValueError(f"timer_hz must be positive, got {config.timer_hz}")
    config.log_level = config.log_level.upper()
    return config
