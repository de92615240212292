"""
Species Suitability Profiles

Loads per-species tolerance ranges from YAML files under config/species/.

Profile format:
    name: Oysters
    species_label: oyster
    temperature: {min: 11.0, max: 30.0}   # degrees C
    depth: {min: -70.0, max: 0.0}         # metres, negative below sea level

Design Principles:
- Config-driven (no hardcoded thresholds in the pipeline)
- Fail fast on missing files or fields
- The config directory can be overridden with SUITABILITY_CONFIG_DIR

The default directory is the repository's config/, which exists for source
checkouts and editable installs only. A regular `pip install` does not ship
the YAML profiles, so set SUITABILITY_CONFIG_DIR (or pass `config_dir`) to a
directory containing species/<name>.yaml.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, validator

from ..criteria.schemas import SuitabilityCriteria, criteria_from_options

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "SUITABILITY_CONFIG_DIR"
DEFAULT_CONFIG_DIR = Path(__file__).parent.parent.parent.parent / "config"


class SpeciesProfile(BaseModel):
    """Tolerance ranges of one farmed species."""

    species_label: str = Field(..., description="Short identifier, used only for presentation")
    name: str = Field(..., description="Common name")
    min_temp: float = Field(..., description="Lowest suitable sea surface temperature (°C)")
    max_temp: float = Field(..., description="Highest suitable sea surface temperature (°C)")
    min_depth: float = Field(..., description="Lowest suitable depth (m)")
    max_depth: float = Field(..., description="Highest suitable depth (m)")

    @validator('max_temp')
    def temp_range_ordered(cls, v, values):
        """Ensure min_temp <= max_temp"""
        if 'min_temp' in values and v < values['min_temp']:
            raise ValueError(f"max_temp ({v}) must be >= min_temp ({values['min_temp']})")
        return v

    @validator('max_depth')
    def depth_range_ordered(cls, v, values):
        """Ensure min_depth <= max_depth"""
        if 'min_depth' in values and v < values['min_depth']:
            raise ValueError(f"max_depth ({v}) must be >= min_depth ({values['min_depth']})")
        return v

    def to_criteria(self) -> SuitabilityCriteria:
        """Fresh criteria built from this profile's own thresholds."""
        return criteria_from_options(
            min_temp=self.min_temp,
            max_temp=self.max_temp,
            min_depth=self.min_depth,
            max_depth=self.max_depth,
            species_label=self.species_label
        )


def get_config_dir() -> Path:
    """
    Resolve the configuration directory.

    SUITABILITY_CONFIG_DIR (environment or .env file) wins over the
    repository's config/ directory.
    """
    load_dotenv()
    override = os.getenv(CONFIG_DIR_ENV)
    return Path(override) if override else DEFAULT_CONFIG_DIR


def list_species(config_dir: Optional[Path] = None) -> List[str]:
    """Names of all species profiles available in the config directory."""
    species_dir = (config_dir or get_config_dir()) / "species"
    if not species_dir.exists():
        return []
    return sorted(p.stem for p in species_dir.glob("*.yaml"))


def load_species_profile(species: str, config_dir: Optional[Path] = None) -> SpeciesProfile:
    """
    Load a species profile from YAML.

    Args:
        species: Species identifier (e.g. 'oyster', 'lumpsucker')
        config_dir: Optional config directory (defaults to get_config_dir())

    Returns:
        Validated SpeciesProfile

    Raises:
        FileNotFoundError: If the species profile doesn't exist
        ValueError: If the profile is missing fields or has inverted ranges

    Examples:
        >>> profile = load_species_profile('oyster')
        >>> profile.min_temp, profile.max_temp
        (11.0, 30.0)
    """
    config_dir = config_dir or get_config_dir()
    config_path = config_dir / "species" / f"{species}.yaml"

    if not config_path.exists():
        raise FileNotFoundError(
            f"Species config not found: {config_path}\n"
            f"Available species: {', '.join(list_species(config_dir)) or 'none'}\n"
            f"Set {CONFIG_DIR_ENV} to a directory containing species/<name>.yaml"
        )

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    required = ['name', 'temperature', 'depth']
    missing = [field for field in required if field not in config]
    if missing:
        raise ValueError(f"Invalid config for {species}: missing fields {missing}")

    for section in ('temperature', 'depth'):
        bounds = config[section] or {}
        bounds_missing = [b for b in ('min', 'max') if b not in bounds]
        if bounds_missing:
            raise ValueError(f"Invalid {section} range for {species}: missing {bounds_missing}")

    profile = SpeciesProfile(
        species_label=config.get('species_label', species),
        name=config['name'],
        min_temp=config['temperature']['min'],
        max_temp=config['temperature']['max'],
        min_depth=config['depth']['min'],
        max_depth=config['depth']['max']
    )
    logger.debug(f"Loaded species profile '{species}' from {config_path}")
    return profile
