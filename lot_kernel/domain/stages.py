"""
Production stages and the process-label parser.

Responsibility:
    Defines the fixed stage vocabulary and turns a memo's free-text
    ``process`` label into a tagged ``StageTransition``: either a
    ``Transition`` ("ROUGH TO PREFORM") or a ``SingleStage`` ("HEAT 2").

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Labels are parsed
    once when a memo crosses the store boundary (``MemoRecord``) so that
    downstream logic never re-parses strings.

Invariants enforced:
    - ``parse_transition`` is total: every string (and ``None``) parses.
    - No validation against ``PRODUCTION_STAGES``.  Unknown or malformed
      labels pass through unchanged.
    - For a label with exactly one separator,
      ``transition.label == process`` (round trip).

Failure modes:
    None.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

PRODUCTION_STAGES: tuple[str, ...] = (
    "ACID",
    "HEAT 1",
    "HEAT 2",
    "ROUGH",
    "PREFORM",
    "CUTTING",
    "CALIBRATE",
)

UNKNOWN_STAGE = "Unknown"

TRANSITION_SEPARATOR = " TO "


@dataclass(frozen=True)
class SingleStage:
    """A process label naming one stage (no movement between stages)."""

    stage: str

    is_transition: ClassVar[bool] = False

    @property
    def from_stage(self) -> str:
        return self.stage

    @property
    def to_stage(self) -> str:
        return self.stage

    @property
    def label(self) -> str:
        return self.stage


@dataclass(frozen=True)
class Transition:
    """A process label moving material from one stage to another."""

    from_stage: str
    to_stage: str

    is_transition: ClassVar[bool] = True

    @property
    def label(self) -> str:
        return f"{self.from_stage}{TRANSITION_SEPARATOR}{self.to_stage}"


StageTransition = SingleStage | Transition


def parse_transition(process: str | None) -> StageTransition:
    """
    Parse a memo process label.

    A label containing the literal ``" TO "`` becomes a ``Transition`` of
    the text before and after the separator.  If the separator occurs more
    than once, the first two segments are used.  Any other label is a
    ``SingleStage`` whose from/to stage are the whole label.

    Args:
        process: The memo's ``process`` field.  ``None`` is treated as "".

    Returns:
        ``Transition`` or ``SingleStage``.
    """
    label = process or ""
    if TRANSITION_SEPARATOR not in label:
        return SingleStage(stage=label)
    segments = label.split(TRANSITION_SEPARATOR)
    return Transition(from_stage=segments[0], to_stage=segments[1])
