# tests/core/config/test_schema.py
"""
Testes de RunnerConfig: validação, serialização e overrides de chamada.
"""

import pytest

try:
    from scrapeflow.core.config.errors import InvalidConfigValueError
    from scrapeflow.core.config.schema import (
        BackoffStrategy,
        LogLevel,
        Mode,
        RateLimit,
        RunnerConfig,
        parse_mode,
    )
except Exception as e:  # noqa: BLE001
    RunnerConfig = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Missing RunnerConfig. Import error: {_IMPORT_ERR}")


def test_defaults():
    _require_imports()
    cfg = RunnerConfig.from_dict({})

    assert cfg.mode is Mode.DEVELOPMENT
    assert not cfg.is_production
    assert cfg.delay == 1.0
    assert cfg.max_items is None
    assert cfg.resume_from_log is True
    assert cfg.rate_limit is None
    assert cfg.retry is None
    assert cfg.telemetry.log_level is LogLevel.INFO


def test_invalid_mode_message():
    _require_imports()
    with pytest.raises(InvalidConfigValueError, match='Invalid mode "staging". Expected "development" or "production".'):
        parse_mode("staging")


@pytest.mark.parametrize(
    "data",
    [
        {"delay": -1},
        {"delay": "fast"},
        {"max_items": 0},
        {"max_items": 2.5},
        {"rate_limit": {"requests": 0, "per_seconds": 1}},
        {"rate_limit": {"requests": 1, "per_seconds": 0}},
        {"retry": {"backoff_strategy": "fibonacci"}},
        {"telemetry": {"log_level": "verbose"}},
        {"telemetry": "loud"},
    ],
)
def test_invalid_values_are_rejected(data):
    _require_imports()
    with pytest.raises(InvalidConfigValueError):
        RunnerConfig.from_dict(data)


def test_to_dict_is_serializable_and_flattens_extra():
    _require_imports()
    cfg = RunnerConfig.from_dict(
        {
            "mode": "production",
            "retry": {"attempts": 5, "backoff_strategy": "linear", "base_delay": 1},
            "output_dir": "./data",
        }
    )
    out = cfg.to_dict()

    assert out["mode"] == "production"
    assert out["retry"] == {"attempts": 5, "backoff_strategy": "linear", "base_delay": 1}
    assert out["telemetry"] == {"enabled": True, "log_level": "info"}
    assert out["output_dir"] == "./data"
    assert "extra" not in out
    assert cfg.retry.backoff_strategy is BackoffStrategy.LINEAR


def test_with_overrides_returns_new_instance():
    _require_imports()
    base = RunnerConfig(rate_limit=RateLimit(requests=4, per_seconds=2.0))
    changed = base.with_overrides(mode="production", delay=0.1, max_items=7)

    assert changed is not base
    assert changed.mode is Mode.PRODUCTION
    assert changed.delay == 0.1
    assert changed.max_items == 7
    assert changed.rate_limit == base.rate_limit
    assert base.mode is Mode.DEVELOPMENT


def test_with_overrides_none_keeps_values():
    _require_imports()
    base = RunnerConfig(delay=2.0)
    assert base.with_overrides() is base
