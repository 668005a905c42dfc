from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChunkingConfig(BaseModel):
    """Thresholds for the chunking pipeline.

    Passed explicitly to the preflight gate, format detector and router so that
    every decision is a function of (text, config).
    """

    min_clean_chars: int = Field(80, description="Minimum trimmed characters to chunk")
    min_clean_tokens_est: int = Field(20, description="Minimum whitespace tokens to chunk")
    short_post_max_tokens: int = Field(
        60, description="Texts below this token count are short posts"
    )
    llm_min_tokens: int = Field(60, description="Lower bound (inclusive) of the LLM band")
    llm_max_tokens: int = Field(800, description="Upper bound (inclusive) of the LLM band")
    max_llm_artifacts: int = Field(200, description="Artifacts read per item")

    @classmethod
    def from_mapping(cls, bag: Optional[Mapping[str, Any]]) -> "ChunkingConfig":
        """Build a config from a loose bag; missing or null keys use defaults."""
        if not bag:
            return cls()
        known = {
            key: int(value)
            for key, value in bag.items()
            if key in cls.model_fields and value is not None
        }
        return cls(**known)


class Settings(BaseSettings):
    # Database (required for persistence commands)
    CHUNKFLOW_DB_URL: Optional[str] = None

    # Preflight gating thresholds
    CHUNKING_MIN_CLEAN_CHARS: int = 80
    CHUNKING_MIN_CLEAN_TOKENS_EST: int = 20

    # Format detection / routing
    CHUNKING_SHORT_POST_MAX_TOKENS: int = 60
    CHUNKING_LLM_MIN_TOKENS: int = 60
    CHUNKING_LLM_MAX_TOKENS: int = 800
    CHUNKING_MAX_LLM_ARTIFACTS: int = 200

    # Workspace paths
    CHUNKFLOW_WORKDIR: str = "var"  # Tool-managed artifacts (event logs)

    # Observability
    LOG_FORMAT: str = "auto"  # json|plain|auto

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    def chunking_config(self) -> ChunkingConfig:
        return ChunkingConfig.from_mapping(
            {
                "min_clean_chars": self.CHUNKING_MIN_CLEAN_CHARS,
                "min_clean_tokens_est": self.CHUNKING_MIN_CLEAN_TOKENS_EST,
                "short_post_max_tokens": self.CHUNKING_SHORT_POST_MAX_TOKENS,
                "llm_min_tokens": self.CHUNKING_LLM_MIN_TOKENS,
                "llm_max_tokens": self.CHUNKING_LLM_MAX_TOKENS,
                "max_llm_artifacts": self.CHUNKING_MAX_LLM_ARTIFACTS,
            }
        )

    @classmethod
    def load_config(cls, config_file: Optional[str] = None) -> "Settings":
        """Load settings with config file -> env precedence."""
        config_data: Dict[str, Any] = {}

        config_path: Optional[Path]
        if config_file:
            config_path = Path(config_file)
        else:
            # Auto-discover .chunkflow.{yaml,yml,toml}
            for ext in ["yaml", "yml", "toml"]:
                config_path = Path(f".chunkflow.{ext}")
                if config_path.exists():
                    break
            else:
                config_path = None

        if config_path and config_path.exists():
            if config_path.suffix in [".yaml", ".yml"]:
                import yaml  # type: ignore[import-untyped]

                with open(config_path) as f:
                    config_data = yaml.safe_load(f) or {}
            elif config_path.suffix == ".toml":
                import tomllib

                with open(config_path, "rb") as f:
                    config_data = tomllib.load(f)

        # Environment variables override file values
        merged = {**config_data, **cls().model_dump(exclude_unset=True)}
        return cls(**merged)


# Default settings - replaced by load_config() during CLI startup
SETTINGS = Settings()
