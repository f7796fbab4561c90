"""Tests for machine configuration."""

import pytest
from omegaconf.errors import ConfigKeyError, ValidationError
from chip8vm import MachineConfig, load_config


def test_defaults():
    config = load_config()

    assert config == MachineConfig()
    assert config.ticks_per_frame == 10
    assert config.timer_hz == 60
    assert config.shift_uses_vy is False


def test_dotlist_overrides():
    config = load_config(overrides=["seed=7", "shift_uses_vy=true", "log_level=debug"])

    assert config.seed == 7
    assert config.shift_uses_vy is True
    assert config.log_level == "DEBUG"


def test_mapping_overrides():
    config = load_config(overrides={"ticks_per_frame": 20})
    assert config.ticks_per_frame == 20


def test_yaml_file(tmp_path):
    path = tmp_path / "machine.yaml"
    path.write_text("seed: 3\nticks_per_frame: 12\n")

    config = load_config(str(path), overrides=["seed=4"])

    assert config.seed == 4
    assert config.ticks_per_frame == 12


def test_type_validation():
    with pytest.raises(ValidationError):
        load_config(overrides=["ticks_per_frame=fast"])


def test_unknown_key_rejected():
    with pytest.raises(ConfigKeyError):
        load_config(overrides=["turbo=true"])


@pytest.mark.parametrize("override", ["ticks_per_frame=0", "timer_hz=-1"])
def test_non_positive_rates_rejected(override):
    with pytest.raises(ValueError):
        load_config(overrides=[override])
