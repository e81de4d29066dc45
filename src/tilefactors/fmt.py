# src/tilefactors/fmt.py
from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from colorama import Fore, Style
from sympy import factorint

from tilefactors.runtime import CFG
from tilefactors.runtime import current as _rt_current

if TYPE_CHECKING:
    from tilefactors.factors import Factors
    from tilefactors.residual import ResidualFactors

# Single source of truth for ANSI stripping
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(s: str | None) -> str:
    return ANSI_RE.sub("", s or "")


def _use_color(color: bool | None) -> bool:
    return _rt_current().color if color is None else color


def _paint(text: str, style: str, color: bool) -> str:
    return f"{style}{text}{Style.RESET_ALL}" if color else text


def format_factorization(fac: Mapping[int, int]) -> str:
    """{2: 2, 3: 1} -> '2^2 × 3'."""
    if not fac:
        return "1"
    return " × ".join(f"{p}^{e}" if e > 1 else f"{p}" for p, e in sorted(fac.items()))


def format_prime_factorization(n: int) -> str:
    return format_factorization(factorint(n))


def format_tuple(values: Iterable[int], sep: str | None = None) -> str:
    if sep is None:
        sep = str(CFG("DISPLAY.SEPARATOR", " * "))
    return sep.join(str(v) for v in values)


def format_all_factors(obj: Factors | ResidualFactors, *, color: bool | None = None) -> str:
    color = _use_color(color)
    head = _paint(f"All factors of {obj.n}:", Fore.CYAN, color)
    return f"{head} " + ", ".join(str(f) for f in obj.all_factors)


def format_cofactors(obj: Factors, *, color: bool | None = None) -> str:
    color = _use_color(color)
    lines = [_paint(f"Co-factors of {obj.n} ({format_prime_factorization(obj.n)}) are:",
                    Fore.CYAN + Style.BRIGHT, color)]
    for t in obj:
        lines.append(f"    {obj.n} = {format_tuple(t)}")
    lines.extend(_demoted_lines(obj, color))
    return "\n".join(lines)


def format_residual_pairs(obj: ResidualFactors, *, color: bool | None = None) -> str:
    color = _use_color(color)
    lines = [_paint(f"Co-factors of {obj.n} with spatial capacities {obj.spatial} are:",
                    Fore.CYAN + Style.BRIGHT, color)]
    for pair in obj:
        live = _paint(f"(residual {format_tuple(pair.residuals)})", Fore.YELLOW, color)
        lines.append(f"    {obj.n} ~ {format_tuple(pair.cofactors)}  {live}")
    if not len(obj):
        lines.append(_paint("    (no valid tiling)", Fore.RED, color))
    lines.extend(_demoted_lines(obj, color))
    return "\n".join(lines)


def _demoted_lines(obj: Factors | ResidualFactors, color: bool) -> list[str]:
    if not obj.demoted:
        return []
    items = ", ".join(f"position {p} = {v}" for p, v in sorted(obj.demoted.items()))
    return [_paint(f"    ignored given factors (set free): {items}", Fore.YELLOW, color)]
