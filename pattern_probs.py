#!/usr/bin/env python3
# Sub-pattern catalogue used for the "max pattern probability" ceilings.
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence


@dataclass(frozen=True)
class PatternDef:
    count_main: int
    count_lucky: int
    special: Optional[int] = None


PATTERNS: List[PatternDef] = [
    PatternDef(5, 2),
    PatternDef(5, 1, 1),
    PatternDef(5, 1, 2),
    PatternDef(5, 0),
    PatternDef(4, 2),
    PatternDef(4, 1, 1),
    PatternDef(4, 1, 2),
    PatternDef(3, 2),
    PatternDef(4, 0),
    PatternDef(2, 2),
    PatternDef(3, 1, 1),
    PatternDef(3, 1, 2),
]


def pattern_key(pattern: PatternDef) -> str:
    key = f"{pattern.count_main}_main+{pattern.count_lucky}_lucky"
    if pattern.special is not None and pattern.count_lucky == 1:
        key += f"_special_{pattern.special}"
    return key


def generate_pattern_probabilities(probs: Sequence[float],
                                   patterns: Sequence[PatternDef] = PATTERNS) -> Dict[str, float]:
    # special only labels the key; the slice is always the leading positions
    out: Dict[str, float] = {}
    for pattern in patterns:
        end = pattern.count_main if pattern.count_lucky == 0 else pattern.count_main + pattern.count_lucky
        part = list(probs[:end])
        out[pattern_key(pattern)] = sum(part) / len(part) if part else 0.0
    return out
