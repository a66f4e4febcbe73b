"""
Configuration loader for pattern-scout.
Loads analysis defaults, logging and directory settings from config.ini.
"""

import configparser
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pattern_scout.analyzer.models import PatternFilter

# Root directory of the repository; config.ini lives in <root>/config
ROOT_DIR = Path(__file__).parent.parent.parent.resolve()
CONFIG_DIR = ROOT_DIR / "config"
CONFIG_INI_PATH = CONFIG_DIR / "config.ini"

_FILTER_FIELDS = {
    'hourly': 'enable_hourly_analysis',
    'daily': 'enable_daily_analysis',
    'weekly': 'enable_weekly_analysis',
    'monthly': 'enable_monthly_analysis',
    'yearly': 'enable_yearly_analysis',
    'moving_averages': 'enable_moving_averages',
    'volume_correlation': 'enable_volume_correlation',
    'volatility': 'enable_volatility_analysis',
    'support_resistance': 'enable_support_resistance',
    'seasonal': 'enable_seasonal_trends',
    'rsi': 'enable_rsi',
}


class Config:
    """Configuration class that loads settings from an INI file.

    A missing file is not an error: every property has a default.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else CONFIG_INI_PATH
        self._config_data: Dict[str, Dict[str, Any]] = {}
        self._load_ini_config()

    def _load_ini_config(self):
        """Load configuration from config.ini file."""
        if not self.config_path.exists():
            logging.debug(f"Configuration file not found: {self.config_path}. Using defaults.")
            return

        try:
            parser = configparser.ConfigParser()
            parser.read(self.config_path, encoding='utf-8')

            for section_name in parser.sections():
                self._config_data[section_name] = {
                    key: self._convert_value(value) for key, value in parser.items(section_name)
                }
        except configparser.Error as e:
            raise RuntimeError(f"Error loading configuration file {self.config_path}: {e}") from e

    @staticmethod
    def _convert_value(value: str) -> Any:
        """Convert string values to appropriate Python types."""
        if value.lower() in ('true', 'yes', 'on'):
            return True
        elif value.lower() in ('false', 'no', 'off'):
            return False
        if value.isdigit():
            return int(value)
        try:
            if '.' in value:
                return float(value)
        except ValueError:
            pass
        if ',' in value:
            return [item.strip() for item in value.split(',')]
        return value

    def get_config(self, section: str, key: str, default: Any = None) -> Any:
        """Get configuration value from INI file."""
        return self._config_data.get(section, {}).get(key, default)

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get entire configuration section."""
        return self._config_data.get(section, {})

    # Debug Configuration
    @property
    def LOGGER_DEBUG(self) -> bool:
        return bool(self.get_config('debug', 'logger_debug', False))

    # Directory Configuration
    @property
    def LOG_DIR(self) -> str:
        return str(self.get_config('directories', 'log_dir', 'logs'))

    # Analysis Configuration
    @property
    def TIME_ZONE(self) -> str:
        return str(self.get_config('analysis', 'time_zone', 'UTC'))

    @property
    def DEFAULT_DAYS(self) -> int:
        """Days of bar history requested from the provider."""
        return int(self.get_config('analysis', 'default_days', 365))

    @property
    def DIVERGENCE_AVERAGE_RETURN(self) -> float:
        """Illustrative return attached to RSI divergence patterns."""
        return float(self.get_config('analysis', 'divergence_average_return', 3.5))

    def pattern_filter(self, **overrides: Any) -> PatternFilter:
        """Build a PatternFilter from [pattern_filter], applying keyword overrides last."""
        section = self.get_section('pattern_filter')
        values: Dict[str, Any] = {'time_zone': self.TIME_ZONE}

        for key, field_name in _FILTER_FIELDS.items():
            if key in section:
                values[field_name] = bool(section[key])
        if 'minimum_confidence' in section:
            values['minimum_confidence'] = float(section['minimum_confidence'])
        if 'minimum_frequency' in section:
            values['minimum_frequency'] = int(section['minimum_frequency'])

        values.update({k: v for k, v in overrides.items() if v is not None})
        return PatternFilter(**values)

    def reload(self):
        """Re-read config.ini so changes apply without restarting."""
        logging.info("Reloading configuration file...")
        self._config_data = {}
        self._load_ini_config()
        logging.info("Configuration reloaded successfully")


# Create global config instance
config = Config()
