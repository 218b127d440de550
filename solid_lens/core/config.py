import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field

# Default configuration values
DEFAULT_CONFIG_PATH = "solidlens.config.yaml"
DEFAULT_PROJECT_ROOT = "."
DEFAULT_WATCH_DIRECTORIES = ["."]
DEFAULT_IGNORED_PATTERNS = ["venv", ".venv", "**/__pycache__", ".git", "node_modules", "dist", "build"]
DEFAULT_LANGUAGES = ["python", "typescript", "javascript", "typescriptreact", "javascriptreact"]

# Principle thresholds
DEFAULT_SRP_LCOM4_THRESHOLD = 1
DEFAULT_OCP_SCORE_THRESHOLD = 4.0
DEFAULT_DIP_SCORE_THRESHOLD = 3.0
DEFAULT_ISP_FAT_INTERFACE_THRESHOLD = 5
DEFAULT_ISP_SIR_THRESHOLD = 0.3

# External scanner
DEFAULT_SEMGREP_PATH = "semgrep"
DEFAULT_RULES_PATH = "semgrep_rules.yaml"
DEFAULT_SCAN_ON_CHANGE_DELAY = 1500


class SolidLensConfig(BaseModel):
    """
    Central configuration model for solid-lens.
    """
    project_root: str = Field(default=DEFAULT_PROJECT_ROOT)
    watch_directories: List[str] = Field(default_factory=lambda: list(DEFAULT_WATCH_DIRECTORIES))
    ignored_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_IGNORED_PATTERNS))
    languages: List[str] = Field(default_factory=lambda: list(DEFAULT_LANGUAGES))

    # Which principles run on each check
    enable_srp: bool = True
    enable_ocp: bool = True
    enable_dip: bool = True
    enable_isp: bool = True

    srp_lcom4_threshold: int = Field(default=DEFAULT_SRP_LCOM4_THRESHOLD)
    ocp_score_threshold: float = Field(default=DEFAULT_OCP_SCORE_THRESHOLD)
    dip_score_threshold: float = Field(default=DEFAULT_DIP_SCORE_THRESHOLD)
    isp_fat_interface_threshold: int = Field(default=DEFAULT_ISP_FAT_INTERFACE_THRESHOLD)
    isp_sir_threshold: float = Field(default=DEFAULT_ISP_SIR_THRESHOLD)

    # Semgrep integration
    semgrep_enabled: bool = True
    semgrep_path: str = Field(default=DEFAULT_SEMGREP_PATH)
    rules_path: str = Field(default=DEFAULT_RULES_PATH)
    use_cache: bool = True

    # Watch triggers
    scan_on_save: bool = True
    scan_on_open: bool = True
    scan_on_change: bool = False
    scan_on_change_delay: int = Field(default=DEFAULT_SCAN_ON_CHANGE_DELAY)

    # Unknown keys from older config files are kept, not rejected
    model_config = ConfigDict(extra="allow")

    def resolved_project_root(self) -> Path:
        return Path(self.project_root).resolve()

    def resolved_rules_path(self) -> Path:
        rules = Path(self.rules_path)
        if rules.is_absolute():
            return rules
        return self.resolved_project_root() / rules

    def resolved_semgrep_path(self) -> str:
        # A bare command name is looked up on PATH, anything else is project relative
        if self.semgrep_path == DEFAULT_SEMGREP_PATH or Path(self.semgrep_path).is_absolute():
            return self.semgrep_path
        return str(self.resolved_project_root() / self.semgrep_path)


def load_config(
    config_path: Optional[str] = None,
    cli_args: Optional[Dict[str, Any]] = None
) -> SolidLensConfig:
    """
    Load configuration from file and overrides.

    Priority:
    1. CLI Arguments (if provided and not None)
    2. Config File (if provided or found at default path)
    3. Default Values

    Args:
        config_path: Path to the YAML config file. If None, tries 'solidlens.config.yaml'.
        cli_args: Dictionary of CLI arguments to override config values.

    Returns:
        SolidLensConfig: The resolved configuration object.
    """
    config_data: Dict[str, Any] = {}

    target_path = config_path if config_path else DEFAULT_CONFIG_PATH
    path_obj = Path(target_path)

    if path_obj.exists() and path_obj.is_file():
        try:
            with open(path_obj, 'r', encoding='utf-8') as f:
                file_data = yaml.safe_load(f)
                if file_data:
                    config_data.update(file_data)
            logging.info(f"Loaded configuration from {target_path}")
        except (OSError, yaml.YAMLError) as e:
            logging.warning(f"Failed to load config file {target_path}: {e}")
    elif config_path:
        logging.warning(f"Config file not found at explicit path: {config_path}")
    else:
        logging.info(f"No config file found at {DEFAULT_CONFIG_PATH}, using defaults.")

    if cli_args:
        for key, value in cli_args.items():
            if value is not None:
                config_data[key] = value

    return SolidLensConfig(**config_data)
