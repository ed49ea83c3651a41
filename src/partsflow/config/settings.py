from dataclasses import dataclass, field, fields
from typing import Dict, Any, List, Optional
import yaml
from pathlib import Path

from partsflow.config.environment import environment_overrides
from partsflow.core.exceptions import ConfigError

DEFAULT_CATEGORIES = ["Servo Motors", "PLCs", "Sensors", "Actuators", "Controllers", "Other"]
DEFAULT_SUPPLIERS = [
    "ABC Electronics",
    "TechSupply Co.",
    "Industrial Parts Ltd.",
    "AutoMation Inc.",
    "Control Systems Pro",
]
DEFAULT_CUSTOMERS = [
    "Acme Manufacturing",
    "Tech Solutions Inc.",
    "Industrial Corp.",
    "AutoTech Ltd.",
    "Control Systems Co.",
]

@dataclass
class StorageConfig:
    """Where the record store keeps its JSON documents."""
    data_dir: str = "data/store"

@dataclass
class FilePathConfig:
    """File path configuration."""
    export_dir: str = "data/exports"
    log_dir: str = "logs"

@dataclass
class CatalogConfig:
    """Pick lists and ledger behaviour."""
    categories: List[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    suppliers: List[str] = field(default_factory=lambda: list(DEFAULT_SUPPLIERS))
    customers: List[str] = field(default_factory=lambda: list(DEFAULT_CUSTOMERS))
    strict_purchases: bool = False
    dashboard_limit: int = 5

@dataclass
class LoggingConfig:
    level: str = "INFO"
    config_path: Optional[str] = None

@dataclass
class ApplicationConfig:
    """Main application configuration."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    file_paths: FilePathConfig = field(default_factory=FilePathConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

SECTIONS = {
    'storage': StorageConfig,
    'file_paths': FilePathConfig,
    'catalog': CatalogConfig,
    'logging': LoggingConfig,
}

def _build_section(name: str, data: Dict[str, Any]):
    section_cls = SECTIONS[name]
    allowed = {f.name for f in fields(section_cls)}
    unknown = set(data) - allowed
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}' section: {sorted(unknown)}")
    return section_cls(**data)

def apply_environment(config: ApplicationConfig) -> ApplicationConfig:
    """Overlay PARTSFLOW_* environment variables on top of file values."""
    env = environment_overrides()
    if env['data_dir']:
        config.storage.data_dir = env['data_dir']
    if env['export_dir']:
        config.file_paths.export_dir = env['export_dir']
    if env['log_level']:
        config.logging.level = env['log_level']
    return config

def load_config(config_path: str = "config/settings.yaml") -> ApplicationConfig:
    """Load configuration from YAML file and the environment."""
    if not Path(config_path).exists():
        # Return default configuration with environment overrides
        return apply_environment(ApplicationConfig())

    with open(config_path, 'r') as f:
        config_data = yaml.safe_load(f) or {}

    if not isinstance(config_data, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level")

    unknown = set(config_data) - set(SECTIONS)
    if unknown:
        raise ConfigError(f"Unknown configuration sections: {sorted(unknown)}")

    # Convert to dataclasses
    sections = {
        name: _build_section(name, config_data.get(name) or {})
        for name in SECTIONS
    }
    return apply_environment(ApplicationConfig(**sections))
