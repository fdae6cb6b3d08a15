"""
Conversion of LaTeX-style formula text into canonical infix expressions.

The normalizer runs a fixed sequence of rewrites:

1. keep the right-hand side of the first relation (``=``, ``\\approx``,
   ``\\propto``)
2. expand ``\\frac``/``\\dfrac``/``\\tfrac`` and ``\\sqrt`` (including the
   ``\\sqrt[n]{...}`` root form) using balanced-brace matching
3. move powers of functions behind the argument: ``\\sin^2(x)`` becomes
   ``sin(x)^2``
4. replace Greek-letter, function and operator macros, subscripts,
   absolute-value bars and the remaining braces
5. insert the implicit multiplications (``2x``, ``)(``, ``xy``, ``x(``,
   ``)x``) while keeping multi-letter names such as ``sin`` or ``theta`` whole

Every step leaves text it cannot interpret untouched, so ``normalize`` never
raises; malformed input surfaces later as a parse error.
"""

import re
from typing import Iterable, List, Optional, Tuple

from .builtins import BUILTIN_FUNCTIONS, BUILTIN_CONSTANTS, PHYSICAL_CONSTANTS


GREEK_LETTERS = (
    "alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta", "theta",
    "iota", "kappa", "lambda", "mu", "nu", "xi", "pi", "rho", "sigma", "tau",
    "upsilon", "phi", "chi", "psi", "omega",
    "Gamma", "Delta", "Theta", "Lambda", "Xi", "Sigma", "Phi", "Psi", "Omega",
)

# Macro name -> canonical replacement
MACROS = {name: name for name in GREEK_LETTERS}
MACROS.update({
    "varphi": "phi",
    "vartheta": "theta",
    "varepsilon": "epsilon",
    "sin": "sin", "cos": "cos", "tan": "tan",
    "sinh": "sinh", "cosh": "cosh", "tanh": "tanh",
    "arcsin": "asin", "arccos": "acos", "arctan": "atan",
    "ln": "log", "log": "log", "exp": "exp",
    "min": "min", "max": "max",
    "e": "e",
    "cdot": "*", "times": "*", "div": "/",
    "left": "", "right": "",
    "mathrm": "", "operatorname": "", "text": "",
})

# Spacing macros are dropped outright
_SPACING = re.compile(r"\\[,;:! ]")

_UNICODE = {
    "\u03c0": " pi ", "\u03b8": " theta ", "\u03c6": " phi ", "\u03c9": " omega ",
    "\u00b7": "*", "\u00d7": "*", "\u2212": "-", "\u00f7": "/",
}

_RELATION = re.compile(r"=|\\approx|\\propto")
_FRACTION = re.compile(r"\\[dt]?frac")
_SQRT = re.compile(r"\\sqrt")
_POWERED_FUNCTION = re.compile(
    r"\\(sinh|cosh|tanh|sin|cos|tan|log|ln|exp)\^(\{[^{}]*\}|\d+)\s*(?=\()"
)
_MACRO = re.compile(r"\\([A-Za-z]+)")
_SUBSCRIPT = re.compile(r"_\{([A-Za-z0-9]+)\}")

_NAME_START = re.compile(r"[A-Za-z]")
_NUMBER = re.compile(r"\d+\.?\d*|\.\d+")
_SUBSCRIPT_TAIL = re.compile(r"_[A-Za-z0-9]+")


def default_protected_names() -> frozenset:
    """Multi-letter names that implicit multiplication never splits."""
    return (frozenset(BUILTIN_FUNCTIONS) | frozenset(BUILTIN_CONSTANTS)
            | frozenset(PHYSICAL_CONSTANTS) | frozenset(GREEK_LETTERS))


# =============================================================================
# Balanced delimiters
# =============================================================================

def _read_group(text: str, pos: int, open_ch: str = "{",
                close_ch: str = "}") -> Optional[Tuple[str, int]]:
    """Read a balanced group starting at ``pos`` (leading spaces skipped).

    Returns the group content and the index just past the closing delimiter,
    or None if there is no balanced group there.
    """
    while pos < len(text) and text[pos] == " ":
        pos += 1
    if pos >= len(text) or text[pos] != open_ch:
        return None
    depth = 0
    for idx in range(pos, len(text)):
        ch = text[idx]
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return text[pos + 1:idx], idx + 1
    return None


# =============================================================================
# Rewrite steps
# =============================================================================

def strip_relation(text: str) -> str:
    """Keep only what follows the first relation symbol."""
    match = _RELATION.search(text)
    if match is None:
        return text
    return text[match.end():]


def expand_structures(text: str) -> str:
    """Expand fractions and roots, innermost groups included."""
    out: List[str] = []
    pos = 0
    while pos < len(text):
        frac = _FRACTION.match(text, pos)
        if frac:
            num = _read_group(text, frac.end())
            den = _read_group(text, num[1]) if num else None
            if num and den:
                out.append(f"({expand_structures(num[0])})/({expand_structures(den[0])})")
                pos = den[1]
                continue

        root = _SQRT.match(text, pos)
        if root:
            index = _read_group(text, root.end(), "[", "]")
            body = _read_group(text, index[1] if index else root.end())
            if body and index:
                out.append(f"({expand_structures(body[0])})^(1/({expand_structures(index[0])}))")
                pos = body[1]
                continue
            if body:
                out.append(f"sqrt({expand_structures(body[0])})")
                pos = body[1]
                continue

        out.append(text[pos])
        pos += 1
    return "".join(out)


def move_function_powers(text: str) -> str:
    """Rewrite ``\\sin^n(x)`` as ``sin(x)^n``."""
    while True:
        match = _POWERED_FUNCTION.search(text)
        if match is None:
            return text
        name, power = match.group(1), match.group(2)
        arg = _read_group(text, match.end(), "(", ")")
        if arg is None:
            return text
        if power.startswith("{"):
            power = f"({power[1:-1]})"
        text = f"{text[:match.start()]} {MACROS[name]}({arg[0]})^{power}{text[arg[1]:]}"


def replace_macros(text: str) -> str:
    """Replace macros, subscripts and braces with canonical tokens."""
    for char, replacement in _UNICODE.items():
        text = text.replace(char, replacement)
    text = _SPACING.sub(" ", text)

    def _macro(match: re.Match) -> str:
        name = match.group(1)
        return f" {MACROS.get(name, name)} "

    text = _MACRO.sub(_macro, text)
    text = _SUBSCRIPT.sub(r"_\1", text)
    text = expand_absolute_bars(text)
    return text.replace("{", "(").replace("}", ")").replace("[", "(").replace("]", ")")


def expand_absolute_bars(text: str) -> str:
    """Rewrite ``|a|`` as ``abs(a)``; bars pair up left to right.

    An odd number of bars is left as is.
    """
    if text.count("|") % 2:
        return text
    parts = text.split("|")
    out = [parts[0]]
    for idx, part in enumerate(parts[1:]):
        out.append(" abs(" if idx % 2 == 0 else ")")
        out.append(part)
    return "".join(out)


# =============================================================================
# Implicit multiplication
# =============================================================================

def _split_name_run(text: str, pos: int, protected: Iterable[str]) -> Tuple[str, int]:
    """Take one name starting at ``pos``: the longest protected match, else one letter."""
    best = ""
    for name in protected:
        if len(name) > len(best) and text.startswith(name, pos):
            best = name
    if not best:
        best = text[pos]
    end = pos + len(best)
    tail = _SUBSCRIPT_TAIL.match(text, end)
    if tail:
        best += tail.group(0)
        end = tail.end()
    return best, end


def _scan(text: str, protected: frozenset) -> List[Tuple[str, str]]:
    """Split canonical text into (kind, text) atoms: num, name, func, lp, rp, op."""
    atoms: List[Tuple[str, str]] = []
    pos = 0
    while pos < len(text):
        ch = text[pos]
        if ch.isspace():
            pos += 1
            continue
        number = _NUMBER.match(text, pos)
        if number:
            exponent = re.match(r"[eE][+-]?\d+", text[number.end():])
            end = number.end() + (exponent.end() if exponent else 0)
            atoms.append(("num", text[pos:end]))
            pos = end
            continue
        if _NAME_START.match(ch):
            name, pos = _split_name_run(text, pos, protected)
            atoms.append(("func" if name in BUILTIN_FUNCTIONS else "name", name))
            continue
        if ch == "(":
            atoms.append(("lp", ch))
        elif ch == ")":
            atoms.append(("rp", ch))
        else:
            atoms.append(("op", ch))
        pos += 1
    return atoms


def insert_implicit_multiplication(text: str, protected: Iterable[str] = ()) -> str:
    """Make every implied product explicit.

    A function name followed by a bare operand gets that operand as its
    argument, so ``sin x`` becomes ``sin(x)``.
    """
    names = default_protected_names() | frozenset(protected)
    atoms = _scan(text, names)
    out: List[str] = []
    prev_kind = None
    idx = 0
    while idx < len(atoms):
        kind, value = atoms[idx]
        if prev_kind in ("num", "name", "rp") and kind in ("num", "name", "func", "lp"):
            out.append("*")
        if kind == "func":
            nxt = atoms[idx + 1] if idx + 1 < len(atoms) else None
            if nxt is not None and nxt[0] in ("num", "name"):
                out.append(f"{value}({nxt[1]})")
                prev_kind = "rp"
                idx += 2
                continue
        out.append(value)
        prev_kind = kind
        idx += 1
    return "".join(out)


def normalize(raw: str, protected: Iterable[str] = ()) -> str:
    """
    Convert LaTeX-like formula text into canonical infix text.

    Parameters
    ----------
    raw : str
        Formula as entered or stored in the catalog, e.g. ``r = 2(1-\\cos\\theta)``.
    protected : iterable of str
        Extra multi-letter names (parameter names) to keep whole.

    Returns
    -------
    str
        Canonical expression, e.g. ``2*(1-cos(theta))``.
    """
    if not raw:
        return ""
    text = strip_relation(raw)
    text = expand_structures(text)
    text = move_function_powers(text)
    text = replace_macros(text)
    return insert_implicit_multiplication(text, protected)
