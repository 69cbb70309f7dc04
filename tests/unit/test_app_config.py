import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from config import AppConfig, load_config, resolve_route

ROOT = Path(__file__).resolve().parents[2]


def _route(**overrides):
    route = {
        "name": "openai",
        "wire": "openai",
        "base_url": "https://api.example.com",
        "endpoint": "/v1/chat/completions",
        "model": "m",
    }
    route.update(overrides)
    return route


def test_shipped_config_loads():
    cfg = load_config(ROOT / "app_config.json")
    assert set(cfg.providers) == {"openai", "claude", "gemini"}
    assert cfg.providers["gemini"].fallback_on_unavailable is True
    assert cfg.providers["claude"].wire == "anthropic"
    assert cfg.evaluation.deadline_s < min(r.timeout_s for r in cfg.providers.values())


def test_deadline_must_beat_transport_timeout():
    with pytest.raises(ValidationError):
        AppConfig.model_validate(
            {"providers": {"openai": _route(timeout_s=5)}, "evaluation": {"deadline_s": 8}}
        )


def test_resolve_route_defaults_and_missing(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({"provider": "openai", "providers": {"openai": _route()}}), encoding="utf-8")
    cfg = load_config(path)
    assert resolve_route(cfg).name == "openai"
    with pytest.raises(KeyError):
        resolve_route(cfg, "gemini")
