import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="RULEFLOW_", case_sensitive=False, extra="ignore"
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    DIAGNOSTIC_LOG_LEVEL: str = "WARNING"

    # Expressions
    MAX_EXPRESSION_LENGTH: int = 4096
    # Nesting of index and operand sub-expressions; operator chains do not count
    MAX_EXPRESSION_DEPTH: int = 64

    # Lottery draws are reproducible when a seed is set
    LOTTERY_SEED: int | None = None

    @field_validator("LOG_LEVEL", "DIAGNOSTIC_LOG_LEVEL", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        level = str(v).strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("MAX_EXPRESSION_LENGTH", "MAX_EXPRESSION_DEPTH")
    @classmethod
    def positive_limit(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @property
    def diagnostic_level(self) -> int:
        """Numeric logging level for condition diagnostics."""
        return logging.getLevelName(self.DIAGNOSTIC_LOG_LEVEL)


settings = Settings()


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stream handler to the ``ruleflow`` logger.

    Library code only creates module loggers; applications and scripts call
    this once to see engine output.
    """
    logger = logging.getLogger("ruleflow")
    logger.setLevel(level or settings.LOG_LEVEL)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)
    return logger
