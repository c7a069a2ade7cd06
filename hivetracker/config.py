from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class AzureOpenAIConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HIVETRACKER_AZURE_OPENAI__",
        env_file=".env",
        extra="ignore",
    )

    endpoint: str = ""
    api_key: str = ""
    deployment: str = "gpt-4o-mini"
    api_version: str = "2024-12-01-preview"
    timeout_s: float = 20.0

    @property
    def configured(self) -> bool:
        # Short placeholder keys ("undefined", "changeme") count as missing.
        return bool(self.endpoint) and len(self.api_key) > 10


class StorageConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HIVETRACKER_STORAGE__",
        env_file=".env",
        extra="ignore",
    )

    path: Path = Path("hive_entries.json")


class AnalysisConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HIVETRACKER_ANALYSIS__",
        env_file=".env",
        extra="ignore",
    )

    engine: str = "auto"  # "auto" | "local" | "remote"
    remote_max_entries: int = 20


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    azure_openai: AzureOpenAIConfig = AzureOpenAIConfig()
    storage: StorageConfig = StorageConfig()
    analysis: AnalysisConfig = AnalysisConfig()


settings = Settings()
