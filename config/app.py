from __future__ import annotations  # Configuration schema for AI provider routing

from pathlib import Path
from typing import Dict, Literal

from pydantic import BaseModel, Field, model_validator

WireFormat = Literal["openai", "anthropic", "gemini"]


class ProviderRoute(BaseModel):  # AI provider endpoint configuration
    name: str
    wire: WireFormat
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(default=30.0, ge=0.1)
    max_retries: int = Field(default=2, ge=0)
    backoff_s: float = Field(default=1.0, ge=0.0)
    api_key_env: str | None = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=500, ge=1)
    input_cost_per_1k: float = Field(default=0.0005, ge=0.0)
    output_cost_per_1k: float = Field(default=0.0015, ge=0.0)
    flat_cost_per_1k: float = Field(default=0.00002, ge=0.0)
    fallback_on_unavailable: bool = False
    sequential: bool = False
    extra_headers: Dict[str, str] = Field(default_factory=dict)


class EvaluationSettings(BaseModel):  # Understanding-check call budget
    deadline_s: float = Field(default=8.0, ge=0.1)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    max_tokens: int = Field(default=150, ge=1)


class AppConfig(BaseModel):  # Application configuration root
    provider: str = "openai"
    providers: Dict[str, ProviderRoute]
    evaluation: EvaluationSettings = Field(default_factory=EvaluationSettings)

    @model_validator(mode="after")
    def _deadline_beats_transport(self) -> "AppConfig":  # Evaluation deadline must expire before the HTTP timeout
        for name, route in self.providers.items():
            if self.evaluation.deadline_s >= route.timeout_s:
                raise ValueError(
                    f"evaluation.deadline_s ({self.evaluation.deadline_s}) must be shorter than "
                    f"timeout_s ({route.timeout_s}) of provider '{name}'"
                )
        return self


def load_config(path: Path) -> AppConfig:  # Load configuration from disk
    data = path.read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


def resolve_route(cfg: AppConfig, provider: str | None = None) -> ProviderRoute:  # Pick the configured provider route
    name = provider or cfg.provider
    if name not in cfg.providers:
        raise KeyError(f"Provider '{name}' missing from configuration")
    return cfg.providers[name]
