"""Species tolerance profiles for the suitability engine."""

from .config import (
    SpeciesProfile,
    load_species_profile,
    list_species,
    get_config_dir,
)

__all__ = [
    'SpeciesProfile',
    'load_species_profile',
    'list_species',
    'get_config_dir',
]
