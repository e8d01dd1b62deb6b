"""Step output references: ``$stepId.path.to[0].value``.

A reference names a prior step and a path into its output. Parsing and
evaluation are separate so the executor can derive dependencies from a plan
without touching any outputs:

>>> ref = parse_reference("$step1.images[0].url")
>>> ref.step_id, ref.path
('step1', (Key(name='images'), Index(position=0), Key(name='url')))
>>> evaluate(ref.path, {"images": [{"url": "https://cdn/x.png"}]})
'https://cdn/x.png'

Evaluation returns ``MISSING`` when any segment cannot be followed or lands on
``None``; callers keep their literal input in that case.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from toolmesh_ai.core.errors import ToolMeshError

REFERENCE_PREFIX = "$"

_STEP_ID = re.compile(r"[^.\[\]\s]+")
_KEY = re.compile(r"\.([^.\[\]]+)")
_INDEX = re.compile(r"\[(\d+)\]")


class ReferenceSyntaxError(ToolMeshError):
    def __init__(self, reference: str, reason: str) -> None:
        super().__init__(f"Malformed reference {reference!r}: {reason}")
        self.reference = reference


@dataclass(frozen=True)
class Key:
    name: str


@dataclass(frozen=True)
class Index:
    position: int


Segment = Union[Key, Index]


@dataclass(frozen=True)
class Reference:
    step_id: str
    path: Tuple[Segment, ...]


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def is_reference(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(REFERENCE_PREFIX)


def referenced_step(value: str) -> Optional[str]:
    """Step id a reference points at, even when the rest of the path is malformed."""
    if not is_reference(value):
        return None
    match = _STEP_ID.match(value, len(REFERENCE_PREFIX))
    return match.group(0) if match else None


def parse_reference(value: str) -> Reference:
    """
    Parse ``$stepId`` followed by ``.key`` and ``[index]`` segments.

    Raises:
        ReferenceSyntaxError: If ``value`` is not a well-formed reference.
    """
    if not is_reference(value):
        raise ReferenceSyntaxError(value, "must start with '$'")

    pos = len(REFERENCE_PREFIX)
    head = _STEP_ID.match(value, pos)
    if head is None:
        raise ReferenceSyntaxError(value, "missing step id")
    pos = head.end()

    segments: list[Segment] = []
    while pos < len(value):
        key = _KEY.match(value, pos)
        if key is not None:
            segments.append(Key(key.group(1)))
            pos = key.end()
            continue
        index = _INDEX.match(value, pos)
        if index is not None:
            segments.append(Index(int(index.group(1))))
            pos = index.end()
            continue
        raise ReferenceSyntaxError(value, f"unexpected character at offset {pos}")

    return Reference(step_id=head.group(0), path=tuple(segments))


def evaluate(path: Sequence[Segment], root: Any) -> Any:
    """Walk ``path`` through ``root``; ``MISSING`` if any segment is absent or ``None``."""
    current = root
    if current is None:
        return MISSING
    for segment in path:
        if isinstance(segment, Key):
            if not isinstance(current, Mapping) or segment.name not in current:
                return MISSING
            current = current[segment.name]
        else:
            if isinstance(current, (str, bytes)) or not isinstance(current, Sequence):
                return MISSING
            if segment.position >= len(current):
                return MISSING
            current = current[segment.position]
        if current is None:
            return MISSING
    return current
