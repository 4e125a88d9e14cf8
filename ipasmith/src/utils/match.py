from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union
import glob


@dataclass(frozen=True)
class NotFound:
    pattern: str


@dataclass(frozen=True)
class Ambiguous:
    pattern: str
    paths: List[Path] = field(default_factory=list)


@dataclass(frozen=True)
class Found:
    pattern: str
    path: Path


MatchResult = Union[NotFound, Ambiguous, Found]


def expect_exactly_one(pattern: str | Path) -> MatchResult:
    """Glob `pattern` and classify the outcome instead of raising"""
    pattern = str(pattern)
    paths = sorted(Path(p) for p in glob.glob(pattern))

    if not paths:
        return NotFound(pattern)
    if len(paths) > 1:
        return Ambiguous(pattern, paths)
    return Found(pattern, paths[0])
