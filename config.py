# config.py – Centralized configuration with validation
#
# Values are read from the environment when a Config is built, not at import,
# so a .env loaded by the entrypoint is honoured. Build one with load_config().
from __future__ import annotations
import os
from dataclasses import dataclass, field


def _getenv_bool(key: str, default: bool = False) -> bool:
    """Helper to parse boolean environment variables consistently."""
    value = os.getenv(key, str(default)).lower()
    return value in ("1", "true", "yes", "y", "on")


def _getenv_int(key: str, default: int) -> int:
    """Helper to parse integer environment variables with validation."""
    try:
        return int(os.getenv(key, str(default)))
    except ValueError:
        raise ValueError(f"Invalid integer value for {key}: {os.getenv(key)}")


def _getenv_float(key: str, default: float) -> float:
    """Helper to parse float environment variables with validation."""
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        raise ValueError(f"Invalid float value for {key}: {os.getenv(key)}")


def _env_str(key: str, default: str = ""):
    return field(default_factory=lambda: os.getenv(key, default))


def _env_int(key: str, default: int):
    return field(default_factory=lambda: _getenv_int(key, default))


def _env_float(key: str, default: float):
    return field(default_factory=lambda: _getenv_float(key, default))


def _env_bool(key: str, default: bool = False):
    return field(default_factory=lambda: _getenv_bool(key, default))


@dataclass(frozen=True)
class DatabaseConfig:
    """Database configuration."""
    url: str = _env_str("DATABASE_URL")
    connect_timeout: int = _env_int("DB_CONNECT_TIMEOUT", 10)
    # Rows per round trip on the server-side catalog cursor
    fetch_size: int = _env_int("DB_FETCH_SIZE", 500)

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    def __post_init__(self):
        if self.connect_timeout < 0:
            raise ValueError("DB_CONNECT_TIMEOUT must be >= 0")
        if self.fetch_size < 1:
            raise ValueError("DB_FETCH_SIZE must be >= 1")


@dataclass(frozen=True)
class PlotConfig:
    """Output locations and plotting commands for progress images."""
    progress_dir: str = _env_str("PLOTS_PROGRESS_DIR", "/home/tdesell/exact/www/progress")
    hyperparameters_dir: str = _env_str("PLOTS_HYPERPARAMETERS_DIR", "/home/tdesell/exact/www/hyperparameters")
    data_dir: str = _env_str("EXACT_DATA_DIR", "/projects/csg/exact_data")

    # Images younger than this are not regenerated
    freshness_window_seconds: float = _env_float("PLOTS_FRESHNESS_WINDOW_SEC", 300.0)

    # External plotting commands
    python_executable: str = _env_str("PLOTS_PYTHON", "python")
    progress_script: str = _env_str("PLOT_PROGRESS_SCRIPT", "/home/tdesell/exact/visualization/plot_progress.py")
    hyperparameters_script: str = _env_str(
        "PLOT_HYPERPARAMETERS_SCRIPT", "/home/tdesell/exact/visualization/plot_hyperparameters.py"
    )
    command_timeout_seconds: float = _env_float("PLOT_COMMAND_TIMEOUT_SEC", 0.0)  # 0 = wait forever

    fail_on_command_error: bool = _env_bool("PLOTS_FAIL_ON_COMMAND_ERROR")

    @property
    def command_timeout(self):
        """Timeout for subprocess.run, None when unbounded."""
        return self.command_timeout_seconds or None

    def __post_init__(self):
        """Validate plot configuration."""
        if self.freshness_window_seconds < 0:
            raise ValueError("PLOTS_FRESHNESS_WINDOW_SEC must be >= 0")
        if self.command_timeout_seconds < 0:
            raise ValueError("PLOT_COMMAND_TIMEOUT_SEC must be >= 0")
        for name in ("progress_dir", "hyperparameters_dir", "data_dir",
                     "python_executable", "progress_script", "hyperparameters_script"):
            if not getattr(self, name):
                raise ValueError(f"PlotConfig.{name} must not be empty")


@dataclass(frozen=True)
class Config:
    """Master configuration object."""
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    plots: PlotConfig = field(default_factory=PlotConfig)

    def validate(self):
        """Validate the complete configuration."""
        self.database.__post_init__()
        self.plots.__post_init__()


def load_config() -> Config:
    """Build and validate a Config from the current environment. Raises ValueError."""
    config = Config()
    config.validate()
    return config
