import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")

SUPPORTED_CURVES = ("bn254",)


@dataclass
class ProverConfig:
    curve: str = "bn254"
    # Default number of options on the ballot; choices are 0..max_choice-1
    max_choice: int = 3
    # Subgroup-check G2 points when importing keys
    validate_keys_on_load: bool = True
    verify_after_prove: bool = False

    def __post_init__(self):
        if self.curve not in SUPPORTED_CURVES:
            raise ValueError(f"Unsupported curve: {self.curve}")
        if self.max_choice < 1:
            raise ValueError("max_choice must be at least 1")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProverConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown prover settings: {sorted(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class SystemConfig:
    prover_config: ProverConfig = field(default_factory=ProverConfig)

    log_dir: Path = field(default_factory=lambda: Path("logs"))
    log_level: str = "INFO"
    enable_debug_mode: bool = False

    def __post_init__(self):
        self.log_dir = Path(self.log_dir)
        if self.enable_debug_mode:
            self.log_level = "DEBUG"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'prover': asdict(self.prover_config),
            'log_dir': str(self.log_dir),
            'log_level': self.log_level,
            'enable_debug_mode': self.enable_debug_mode,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SystemConfig":
        return cls(
            prover_config=ProverConfig.from_dict(data.get('prover') or {}),
            log_dir=data.get('log_dir', 'logs'),
            log_level=data.get('log_level', 'INFO'),
            enable_debug_mode=data.get('enable_debug_mode', False),
        )


def load_config(config_path: Optional[Path] = None) -> SystemConfig:
    """Read YAML settings; a missing or unreadable file gives the defaults"""
    config_path = Path(config_path or DEFAULT_CONFIG_PATH)
    if not config_path.exists():
        logger.info(f"No config at {config_path}, using defaults")
        return SystemConfig()

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
        return SystemConfig.from_dict(data)
    except (OSError, yaml.YAMLError, AttributeError, TypeError) as e:
        logger.warning(f"Could not load config file {config_path}: {e}")
        logger.warning("Using default configuration")
        return SystemConfig()


def save_config(config: SystemConfig, config_path: Optional[Path] = None):
    config_path = Path(config_path or DEFAULT_CONFIG_PATH)
    with open(config_path, 'w') as f:
        yaml.safe_dump(config.to_dict(), f, default_flow_style=False)
