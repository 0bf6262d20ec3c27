import pytest
from dataclasses import dataclass, field
from psar_engine.config import AccelerationConfig, Config, load_config
from psar_engine.errors import InvalidConfig
from psar_engine.validator import validate_keys

# --- 1. Validator Tests (The "Typos" Check) ---


@dataclass
class MockSubConfig:
    sub_param: int = 10


@dataclass
class MockConfig:
    main_param: int = 1
    nested: MockSubConfig = field(default_factory=MockSubConfig)


def test_validator_detects_unknown_keys_root():
    bad_data = {"main_param": 1, "fake_key": 999}

    with pytest.raises(
        InvalidConfig, match=r"Unknown keys detected at 'root': \['fake_key'\]"
    ):
        validate_keys(bad_data, MockConfig)


def test_validator_detects_unknown_keys_nested():
    bad_data = {"main_param": 1, "nested": {"sub_param": 10, "fake_nested_key": 999}}

    with pytest.raises(
        InvalidConfig, match=r"Unknown keys detected at 'nested': \['fake_nested_key'\]"
    ):
        validate_keys(bad_data, MockConfig)


def test_validator_passes_valid_data():
    validate_keys({"main_param": 5, "nested": {"sub_param": 20}}, MockConfig)


def test_validator_recurses_with_postponed_annotations():
    """Config uses `from __future__ import annotations`; nesting must still be checked."""
    with pytest.raises(InvalidConfig, match="'acceleration'"):
        validate_keys({"acceleration": {"stepp": 0.1}}, Config)


# --- 2. Acceleration bounds ---


def test_defaults_are_wilder():
    a = AccelerationConfig()
    assert a.step == 0.02
    assert a.max == 0.2


@pytest.mark.parametrize("step", [0, -0.01])
def test_step_must_be_positive(step):
    with pytest.raises(InvalidConfig, match="acceleration factor must be > 0"):
        AccelerationConfig(step=step, max=0.2)


@pytest.mark.parametrize("amax", [0.02, 0.01])
def test_max_must_exceed_step(amax):
    with pytest.raises(
        InvalidConfig,
        match="maximum acceleration must be greater than acceleration factor",
    ):
        AccelerationConfig(step=0.02, max=amax)


def test_non_numeric_acceleration_rejected():
    with pytest.raises(InvalidConfig, match="must be a number"):
        AccelerationConfig(step="0.02", max=0.2)


# --- 3. Loader ---


def test_load_config_integration(tmp_path):
    config_file = tmp_path / "valid.yaml"
    config_file.write_text(
        """
    acceleration:
      step: 0.01
      max: 0.1
    output:
      column: psar
    """,
        encoding="utf-8",
    )

    cfg = load_config(str(config_file))

    assert cfg.acceleration.step == 0.01
    assert cfg.acceleration.max == 0.1
    assert cfg.output.column == "psar"
    # untouched defaults remain
    assert cfg.data.tz == "America/New_York"
    assert cfg.output.include_state is True


def test_load_config_empty_section_keeps_defaults(tmp_path):
    config_file = tmp_path / "empty_section.yaml"
    config_file.write_text("data:\nacceleration:\n  step: 0.03\n", encoding="utf-8")

    cfg = load_config(config_file)
    assert cfg.data.high_col == "high"
    assert cfg.acceleration.step == 0.03


def test_load_config_fails_on_typo(tmp_path):
    config_file = tmp_path / "typo.yaml"
    config_file.write_text(
        """
    acceleration:
      step: 0.02
      maximum: 0.2  # <--- The Typo
    """,
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="Unknown keys detected at 'acceleration'"):
        load_config(str(config_file))


def test_load_config_revalidates_acceleration(tmp_path):
    config_file = tmp_path / "bad_bounds.yaml"
    config_file.write_text("acceleration:\n  step: 0.3\n", encoding="utf-8")

    with pytest.raises(InvalidConfig, match="maximum acceleration"):
        load_config(config_file)


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_load_config_empty_file(tmp_path):
    config_file = tmp_path / "empty.yaml"
    config_file.write_text("", encoding="utf-8")
    assert load_config(config_file) == Config()
