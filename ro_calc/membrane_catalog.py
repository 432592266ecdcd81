"""
Membrane catalog handling.

The default catalog comes from the configuration (config/membranes.yaml)
and is exposed as an immutable tuple. Calculations receive a catalog
explicitly; a catalog supplied in the configuration always takes precedence.
"""

import logging
import re
from typing import Iterable, Optional, Sequence, Tuple

from .constants import DEFAULT_MEMBRANE_RECORDS
from .schemas import MembraneSpec

logger = logging.getLogger(__name__)

MembraneCatalog = Tuple[MembraneSpec, ...]

# Used only when every catalog is empty
GENERIC_MEMBRANE = MembraneSpec(id='generic', name='Generic brackish element')


def build_catalog(records: Iterable) -> MembraneCatalog:
    """Validate raw records (dicts or MembraneSpec) into a read-only catalog."""
    catalog = []
    for record in records or ():
        if isinstance(record, MembraneSpec):
            catalog.append(record)
        else:
            catalog.append(MembraneSpec.model_validate(record))
    return tuple(catalog)


def load_default_catalog() -> MembraneCatalog:
    """Build the default catalog from configuration."""
    return build_catalog(DEFAULT_MEMBRANE_RECORDS)


DEFAULT_MEMBRANE_CATALOG: MembraneCatalog = load_default_catalog()


def normalize_membrane_name(membrane_model: Optional[str]) -> str:
    """
    Normalize a membrane model name for lookup.

    Case, hyphens, underscores and spaces are ignored, so
    'LFC3-LD-4040', 'lfc3_ld_4040' and 'lfc3ld4040' all match.
    """
    if not membrane_model:
        return ''
    return re.sub(r'[\s_\-]', '', str(membrane_model)).lower()


def resolve_catalog(config_catalog: Sequence[MembraneSpec],
                    default_catalog: Optional[Sequence[MembraneSpec]] = None) -> MembraneCatalog:
    """Pick the catalog for a calculation: caller's first, then the injected default."""
    if config_catalog:
        return tuple(config_catalog)
    if default_catalog is None:
        default_catalog = DEFAULT_MEMBRANE_CATALOG
    return tuple(default_catalog)


def find_membrane(catalog: Sequence[MembraneSpec], membrane_model: Optional[str]) -> MembraneSpec:
    """
    Look up a membrane by id or name.

    Falls back to the first catalog entry, then to a generic element,
    so a calculation always has a membrane to work with.
    """
    wanted = normalize_membrane_name(membrane_model)
    if wanted:
        for membrane in catalog:
            if wanted in (normalize_membrane_name(membrane.id), normalize_membrane_name(membrane.name)):
                return membrane
        logger.warning(f"Membrane model '{membrane_model}' not in catalog, using default")

    if catalog:
        return catalog[0]
    return GENERIC_MEMBRANE
