"""Formula descriptions, slider parameters and evaluation scopes.

A :class:`FormulaSpec` is the immutable description of one graph, either from
the bundled catalog or typed in by a user. Parameters are described by
:class:`ParameterDef` and their live values are held by a
:class:`ParameterSet`, which keeps every value inside its declared range.
The engine only ever sees the plain ``name -> value`` mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple

from .expr.builtins import BUILTIN_CONSTANTS, PHYSICAL_CONSTANTS

__all__ = [
    "FormulaKind",
    "ParameterDef",
    "FormulaSpec",
    "ParameterSet",
    "NAMED_CONSTANTS",
    "build_scope",
    "EDITED_SUFFIX",
]

EDITED_SUFFIX = ".edited"


class FormulaKind(Enum):
    """What kind of geometry a formula produces."""

    FUNCTION_2D = "function_2d"
    PARAMETRIC_2D = "parametric_2d"
    POLAR_2D = "polar_2d"
    SURFACE_3D = "surface_3d"
    PARAMETRIC_CURVE_3D = "parametric_curve_3d"

    @property
    def label(self) -> str:
        return _KIND_LABELS[self]

    @property
    def is_surface(self) -> bool:
        return self is FormulaKind.SURFACE_3D

    @property
    def is_curve(self) -> bool:
        """True for curves traced by a sweep parameter (t or theta)."""
        return self in (FormulaKind.PARAMETRIC_2D, FormulaKind.POLAR_2D,
                        FormulaKind.PARAMETRIC_CURVE_3D)

    @property
    def is_planar(self) -> bool:
        return self in (FormulaKind.FUNCTION_2D, FormulaKind.PARAMETRIC_2D,
                        FormulaKind.POLAR_2D)

    @classmethod
    def parse(cls, text: str) -> "FormulaKind":
        """Accept either the enum value or the catalog label."""
        key = text.strip()
        for kind in cls:
            if key == kind.value or key.lower() == kind.label.lower():
                return kind
        # Mixed labels such as "2D Function/3D Surface" resolve to the surface
        if "3D Surface" in key:
            return cls.SURFACE_3D
        raise ValueError(f"Unknown formula kind '{text}'")


_KIND_LABELS = {
    FormulaKind.FUNCTION_2D: "2D Function",
    FormulaKind.PARAMETRIC_2D: "2D Parametric",
    FormulaKind.POLAR_2D: "2D Polar",
    FormulaKind.SURFACE_3D: "3D Surface",
    FormulaKind.PARAMETRIC_CURVE_3D: "3D Parametric Curve",
}


@dataclass(frozen=True)
class ParameterDef:
    """One slider: its label, range, step and default value."""

    name: str
    label: str
    min: float
    max: float
    step: float = 0.1
    default: float = 0.0

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError(
                f"Parameter '{self.name}' has min {self.min} greater than max {self.max}"
            )

    def clamp(self, value: float) -> float:
        return min(self.max, max(self.min, value))


@dataclass(frozen=True)
class FormulaSpec:
    """Immutable description of one graph."""

    id: str
    display_name: str
    category: str
    raw_expression: str
    kind: FormulaKind
    subject: str = ""
    level: str = ""
    description: str = ""
    variable: str = "x"     # swept coordinate of a 2D function
    parameters: Tuple[ParameterDef, ...] = ()

    def with_expression(self, raw_expression: str, kind: Optional[FormulaKind] = None) -> "FormulaSpec":
        """Return a copy describing edited formula text.

        Changed text gets a distinct id so named-shape solvers keyed on the
        catalog id no longer apply to it.
        """
        new_id = self.id
        if raw_expression != self.raw_expression and not self.id.endswith(EDITED_SUFFIX):
            new_id = self.id + EDITED_SUFFIX
        return FormulaSpec(
            id=new_id,
            display_name=self.display_name,
            category=self.category,
            raw_expression=raw_expression,
            kind=kind or self.kind,
            subject=self.subject,
            level=self.level,
            description=self.description,
            variable=self.variable,
            parameters=self.parameters,
        )

    @property
    def parameter_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.parameters)


@dataclass
class _Slot:
    definition: ParameterDef
    current: float


class ParameterSet(Mapping[str, float]):
    """Live slider values, always inside each parameter's range.

    Reading the set as a mapping yields current values::

        params = ParameterSet.from_defs(spec.parameters)
        params.set("a", 99.0)      # clamped to the slider maximum
        build_geometry(spec, params.values())
    """

    def __init__(self, definitions: Iterable[ParameterDef] = ()):
        self._slots: Dict[str, _Slot] = {}
        for definition in definitions:
            self._slots[definition.name] = _Slot(definition, definition.clamp(definition.default))

    @classmethod
    def from_defs(cls, definitions: Iterable[ParameterDef]) -> "ParameterSet":
        return cls(definitions)

    def set(self, name: str, value: float) -> float:
        """Set a parameter, clamping into its range; returns the stored value."""
        slot = self._slots.get(name)
        if slot is None:
            raise KeyError(f"Unknown parameter '{name}'")
        slot.current = slot.definition.clamp(float(value))
        return slot.current

    def reset(self) -> None:
        """Return every parameter to its default."""
        for slot in self._slots.values():
            slot.current = slot.definition.clamp(slot.definition.default)

    def definition(self, name: str) -> ParameterDef:
        return self._slots[name].definition

    def values(self) -> Dict[str, float]:
        """Plain ``name -> value`` mapping handed to the engine."""
        return {name: slot.current for name, slot in self._slots.items()}

    def __getitem__(self, name: str) -> float:
        return self._slots[name].current

    def __iter__(self) -> Iterator[str]:
        return iter(self._slots)

    def __len__(self) -> int:
        return len(self._slots)

    def __repr__(self) -> str:
        return f"ParameterSet({self.values()!r})"


# Lowest-priority names in every scope
NAMED_CONSTANTS: Mapping[str, float] = {**BUILTIN_CONSTANTS, **PHYSICAL_CONSTANTS}


def build_scope(
    coordinates: Mapping[str, float],
    parameters: Optional[Mapping[str, float]] = None,
    fallbacks: Optional[Mapping[str, float]] = None,
) -> Dict[str, float]:
    """Merge the names visible to one evaluation.

    Priority, lowest to highest: named constants, kind-specific fallback
    symbols, parameters, coordinates.
    """
    scope: Dict[str, float] = dict(NAMED_CONSTANTS)
    if fallbacks:
        scope.update(fallbacks)
    if parameters:
        scope.update(parameters)
    scope.update(coordinates)
    return scope
