"""Formula catalog loading with bundled data and external override support.

The catalog is two YAML files:

- ``formulas.yaml``: formulas grouped by category, then subject
- ``parameters.yaml``: slider definitions keyed by formula id

Bundled copies ship in ``formulagraph/data``. Directories listed in the
environment variable below are searched first, so a deployment can replace
either file without touching the package.

Environment Variables:
    FORMULAGRAPH_CATALOG_DATA: Colon-separated (or semicolon on Windows) paths
                               to directories containing catalog YAML files.

Example:
    export FORMULAGRAPH_CATALOG_DATA="/srv/formulas"
"""

from __future__ import annotations

import logging
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .formula import FormulaKind, FormulaSpec, ParameterDef

__all__ = [
    "FORMULAGRAPH_CATALOG_DATA",
    "FORMULAS_FILE",
    "PARAMETERS_FILE",
    "clear_cache",
    "load_catalog",
    "load_formulas",
    "get_formula",
    "formulas_by_category",
    "formulas_by_subject",
    "categories",
    "subjects",
    "ordered_formulas",
    "parameters_for",
    "default_parameters",
]

logger = logging.getLogger(__name__)

# Environment variable name for custom data paths
FORMULAGRAPH_CATALOG_DATA = "FORMULAGRAPH_CATALOG_DATA"

FORMULAS_FILE = "formulas.yaml"
PARAMETERS_FILE = "parameters.yaml"

# Bundled data location (relative to this file)
_BUNDLED_DATA_DIR = Path(__file__).parent / "data"

_REQUIRED_SECTION = {
    FORMULAS_FILE: "formulas",
    PARAMETERS_FILE: "parameters",
}


def clear_cache() -> None:
    """Clear all cached catalog data.

    Call this after changing the catalog files or the environment variable.
    """
    _get_data_dirs.cache_clear()
    _load_catalog_cached.cache_clear()
    _load_entries.cache_clear()


@lru_cache(maxsize=None)
def _get_data_dirs() -> Tuple[Path, ...]:
    """Return data directories to search, in priority order."""
    dirs: List[Path] = []

    env_path = os.environ.get(FORMULAGRAPH_CATALOG_DATA)
    if env_path:
        sep = ";" if sys.platform == "win32" else ":"
        for p in env_path.split(sep):
            p = p.strip()
            if p:
                path = Path(p).expanduser().resolve()
                if path.is_dir():
                    dirs.append(path)

    if _BUNDLED_DATA_DIR.is_dir():
        dirs.append(_BUNDLED_DATA_DIR)

    return tuple(dirs)


@lru_cache(maxsize=8)
def _load_catalog_cached(filename: str, custom_path_str: Optional[str]) -> Dict[str, Any]:
    """Cached catalog loading (string path for hashability)."""
    custom_path = Path(custom_path_str) if custom_path_str else None
    if custom_path:
        if not custom_path.exists():
            raise FileNotFoundError(f"Custom catalog not found: {custom_path}")
        return _load_yaml(custom_path, _REQUIRED_SECTION[filename])

    for data_dir in _get_data_dirs():
        path = data_dir / filename
        if path.exists():
            return _load_yaml(path, _REQUIRED_SECTION[filename])

    searched = [str(d) for d in _get_data_dirs()]
    raise FileNotFoundError(
        f"No catalog file '{filename}' found.\n"
        f"Searched directories: {searched}"
    )


def _load_yaml(path: Path, section: str) -> Dict[str, Any]:
    """Load and validate a YAML catalog file."""
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Invalid catalog format in {path}: expected dict at root")

    schema_version = data.get("schema_version", "1.0")
    if not isinstance(schema_version, str) or not schema_version.startswith("1."):
        raise ValueError(
            f"Unsupported schema version '{schema_version}' in {path}. "
            f"Expected version 1.x"
        )

    if not isinstance(data.get(section), dict):
        raise ValueError(f"Catalog {path} missing required '{section}' section")

    data["_source_path"] = str(path)
    logger.debug("loaded catalog %s", path)
    return data


def load_catalog(filename: str = FORMULAS_FILE, custom_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load one raw catalog file.

    Args:
        filename: ``formulas.yaml`` or ``parameters.yaml``
        custom_path: Optional explicit path to a YAML file (overrides search)

    Returns:
        Parsed catalog dictionary, including ``_source_path``

    Raises:
        FileNotFoundError: If no catalog file is found
        ValueError: If the file has an invalid format
    """
    if filename not in _REQUIRED_SECTION:
        raise ValueError(
            f"Unknown catalog file '{filename}'. "
            f"Available: {list(_REQUIRED_SECTION)}"
        )
    custom_str = str(custom_path) if custom_path else None
    return _load_catalog_cached(filename, custom_str)


def _parameter_def(formula_id: str, entry: Dict[str, Any]) -> ParameterDef:
    try:
        return ParameterDef(
            name=str(entry["name"]),
            label=str(entry.get("label", entry["name"])),
            min=float(entry["min"]),
            max=float(entry["max"]),
            step=float(entry.get("step", 0.1)),
            default=float(entry.get("default", 0.0)),
        )
    except KeyError as exc:
        raise ValueError(f"Parameter of '{formula_id}' is missing {exc}") from exc


@lru_cache(maxsize=8)
def _load_entries(formulas_path: Optional[str], parameters_path: Optional[str]
                  ) -> Tuple[Tuple[FormulaSpec, bool], ...]:
    """Flatten the catalog into (spec, listed-with-planar-curves) pairs."""
    formulas = load_catalog(FORMULAS_FILE, Path(formulas_path) if formulas_path else None)
    params = load_catalog(PARAMETERS_FILE, Path(parameters_path) if parameters_path else None)
    controls = params["parameters"]

    entries: List[Tuple[FormulaSpec, bool]] = []
    seen = set()
    for category, by_subject in formulas["formulas"].items():
        for subject, items in (by_subject or {}).items():
            for item in items or ():
                formula_id = item["id"]
                if formula_id in seen:
                    raise ValueError(f"Duplicate formula id '{formula_id}' in catalog")
                seen.add(formula_id)
                definitions = tuple(
                    _parameter_def(formula_id, p) for p in controls.get(formula_id) or ()
                )
                spec = FormulaSpec(
                    id=formula_id,
                    display_name=item["name"],
                    category=category,
                    raw_expression=item["equation_latex"],
                    kind=FormulaKind.parse(item["type"]),
                    subject=subject,
                    level=item.get("level", ""),
                    description=item.get("description", ""),
                    variable=item.get("variable", "x"),
                    parameters=definitions,
                )
                entries.append((spec, bool(item.get("planar_listing", False))))
    return tuple(entries)


def _entries(custom_path: Optional[Path] = None) -> Tuple[Tuple[FormulaSpec, bool], ...]:
    return _load_entries(str(custom_path) if custom_path else None, None)


def load_formulas(custom_path: Optional[Path] = None) -> List[FormulaSpec]:
    """All catalog formulas in file order, sliders attached."""
    return [spec for spec, _ in _entries(custom_path)]


def get_formula(formula_id: str, custom_path: Optional[Path] = None) -> FormulaSpec:
    """Look up a formula by id.

    Raises:
        KeyError: If the id is not in the catalog
    """
    for spec, _ in _entries(custom_path):
        if spec.id == formula_id:
            return spec
    available = sorted(spec.id for spec, _ in _entries(custom_path))
    raise KeyError(
        f"Formula '{formula_id}' not found.\n"
        f"Available formulas: {available}"
    )


def formulas_by_category(category: str, custom_path: Optional[Path] = None) -> List[FormulaSpec]:
    return [spec for spec in load_formulas(custom_path) if spec.category == category]


def formulas_by_subject(subject: str, custom_path: Optional[Path] = None) -> List[FormulaSpec]:
    return [spec for spec in load_formulas(custom_path) if spec.subject == subject]


def categories(custom_path: Optional[Path] = None) -> List[str]:
    """Category names in file order."""
    return list(dict.fromkeys(spec.category for spec in load_formulas(custom_path)))


def subjects(custom_path: Optional[Path] = None) -> List[str]:
    """Subject names in file order, each listed once."""
    return list(dict.fromkeys(spec.subject for spec in load_formulas(custom_path)))


def ordered_formulas(custom_path: Optional[Path] = None) -> List[FormulaSpec]:
    """Browsing order: planar formulas by name, then the 3D formulas by name.

    Space curves flagged ``planar_listing`` (the knot-like curves that read
    as line drawings) are listed with the planar formulas.
    """
    planar: List[FormulaSpec] = []
    spatial: List[FormulaSpec] = []
    for spec, planar_listing in _entries(custom_path):
        if spec.kind.is_planar or planar_listing:
            planar.append(spec)
        else:
            spatial.append(spec)
    planar.sort(key=lambda s: s.display_name.lower())
    spatial.sort(key=lambda s: s.display_name.lower())
    return planar + spatial


def parameters_for(formula_id: str, custom_path: Optional[Path] = None) -> Tuple[ParameterDef, ...]:
    """Slider definitions of a formula; empty for a formula without sliders."""
    return get_formula(formula_id, custom_path).parameters


def default_parameters(formula_id: str, custom_path: Optional[Path] = None) -> Dict[str, float]:
    """``name -> default`` for every slider of a formula."""
    return {p.name: p.clamp(p.default) for p in parameters_for(formula_id, custom_path)}
