"""
Configuration loader for pyarcarbon.
Provides unified access to YAML, TOML, and JSON configuration files.

Supports:
- YAML (.yaml, .yml) - species table, site modifier table, project files
- TOML (.toml) - project files
- JSON (.json) - project files and exported bundles

The reference tables are loaded once per loader and cached; callers receive
read-only views so the tables cannot be mutated at runtime.
"""
import json
import sys
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Union

import yaml

from .exceptions import ConfigurationError, InvalidDataError
from .logging_config import get_logger

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = get_logger(__name__)

SPECIES_CONFIG_FILE = 'species_config.yaml'
SITE_MODIFIERS_FILE = 'site_modifiers.yaml'


def _freeze(data: Any) -> Any:
    """Recursively wrap dicts in MappingProxyType and lists in tuples."""
    if isinstance(data, dict):
        return MappingProxyType({key: _freeze(value) for key, value in data.items()})
    if isinstance(data, list):
        return tuple(_freeze(value) for value in data)
    return data


class ConfigLoader:
    """Loads and caches pyarcarbon reference tables from the cfg/ directory.

    Attributes:
        cfg_dir: Path to the configuration directory
        species_config: Read-only species table
        site_modifiers: Read-only site modifier table
    """

    def __init__(self, cfg_dir: Path = None):
        """Initialize the configuration loader.

        Args:
            cfg_dir: Path to the configuration directory. Defaults to the
                cfg/ directory shipped inside the package.
        """
        if cfg_dir is None:
            cfg_dir = Path(__file__).parent / 'cfg'
        self.cfg_dir = Path(cfg_dir)

        self._file_cache: Dict[str, Mapping[str, Any]] = {}
        self._load_main_config()

    def _load_config_file(self, file_path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML, TOML or JSON file.

        Args:
            file_path: Path to the configuration file

        Returns:
            Dictionary containing configuration data

        Raises:
            ConfigurationError: If the file is missing or the format is not supported
            InvalidDataError: If parsing fails or the file is empty
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise ConfigurationError(f"Configuration file not found: {file_path}")

        suffix = file_path.suffix.lower()

        try:
            if suffix in ['.yaml', '.yml']:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f)
            elif suffix == '.toml':
                with open(file_path, 'rb') as f:
                    data = tomllib.load(f)
            elif suffix == '.json':
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            else:
                raise ConfigurationError(f"Unsupported configuration file format: {suffix}. "
                                         f"Supported formats: .yaml, .yml, .toml, .json")
        except yaml.YAMLError as e:
            raise InvalidDataError("YAML configuration", f"parsing error: {str(e)}") from e
        except json.JSONDecodeError as e:
            raise InvalidDataError("JSON configuration", f"parsing error: {str(e)}") from e
        except tomllib.TOMLDecodeError as e:
            raise InvalidDataError("TOML configuration", f"parsing error: {str(e)}") from e

        if not data:
            raise InvalidDataError(f"configuration file {file_path.name}", "file is empty")
        if not isinstance(data, dict):
            raise InvalidDataError(f"configuration file {file_path.name}", "top level must be a mapping")
        return data

    def _load_main_config(self) -> None:
        """Load the species and site modifier tables."""
        self.species_config = self.load_table(SPECIES_CONFIG_FILE)
        self.site_modifiers = self.load_table(SITE_MODIFIERS_FILE)

        if 'species' not in self.species_config:
            raise ConfigurationError(f"{SPECIES_CONFIG_FILE} has no 'species' section")
        for section in ('site_quality', 'avg_rainfall', 'soil_type'):
            if section not in self.site_modifiers:
                raise ConfigurationError(f"{SITE_MODIFIERS_FILE} has no '{section}' section")

        logger.debug(
            f"Loaded {len(self.species_config['species'])} species from {self.cfg_dir}"
        )

    def load_table(self, filename: str) -> Mapping[str, Any]:
        """Load a reference table from the cfg directory with caching.

        Args:
            filename: Name of the file inside cfg_dir

        Returns:
            Read-only mapping of the file contents
        """
        if filename not in self._file_cache:
            self._file_cache[filename] = _freeze(self._load_config_file(self.cfg_dir / filename))
        return self._file_cache[filename]

    def load_species_config(self, species_code: str) -> Mapping[str, Any]:
        """Get the raw table row for a species.

        Args:
            species_code: Canonical species identifier (e.g. 'teak_moderate')

        Returns:
            Read-only mapping of species parameters

        Raises:
            ConfigurationError: If the enumerated species has no table row
        """
        species = self.species_config['species']
        if species_code not in species:
            raise ConfigurationError(
                f"Species '{species_code}' has no entry in {SPECIES_CONFIG_FILE}"
            )
        return species[species_code]

    def species_aliases(self) -> Mapping[str, str]:
        """Alternate species identifiers accepted at the input boundary."""
        return self.species_config.get('aliases', MappingProxyType({}))

    def clear_cache(self) -> None:
        """Clear cached tables and reload them from disk.

        Useful for testing or when configuration files may have changed.
        """
        self._file_cache.clear()
        self._load_main_config()


def load_project_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """Load a project description (form payload) from YAML, TOML or JSON.

    Project files are user data, not reference tables, so they are returned as
    plain mutable dictionaries and never cached.

    Args:
        file_path: Path to the project file

    Returns:
        Dictionary of form fields
    """
    return get_config_loader()._load_config_file(Path(file_path))


# Global configuration loader instance
_config_loader: ConfigLoader = None


def get_config_loader() -> ConfigLoader:
    """Get the shared configuration loader, creating it on first use.

    Returns:
        The process-wide ConfigLoader instance
    """
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader
