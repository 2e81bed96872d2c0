"""Readiness classification from form (TSB) and wearable recovery scores."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional

from .config import Settings, get_settings


class TsbStatus(str, Enum):
    """Form buckets, freshest first."""
    VERY_FRESH = "very_fresh"
    FRESH = "fresh"
    OPTIMAL = "optimal"
    TIRED = "tired"
    EXHAUSTED = "exhausted"


class RecoveryStatus(str, Enum):
    """Traffic-light recovery buckets."""
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


@dataclass(frozen=True)
class TsbReadiness:
    """Qualitative reading of a TSB value."""

    tsb: float
    status: TsbStatus
    label: str
    color: str  # For UI display
    advice: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(frozen=True)
class RecoveryReadiness:
    """Qualitative reading of a 0-100 recovery score."""

    score: float
    status: RecoveryStatus
    label: str
    color: str
    can_train: bool
    advice: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["status"] = self.status.value
        return data


def interpret_tsb(tsb: float) -> TsbReadiness:
    """
    Classify Training Stress Balance.

    Buckets (strictly greater than, lowest bucket catches the rest):
    - > 25: very fresh
    - > 5: fresh
    - > -10: optimal
    - > -30: tired
    - otherwise: exhausted
    """
    if tsb > 25:
        return TsbReadiness(
            tsb=tsb,
            status=TsbStatus.VERY_FRESH,
            label="Very fresh",
            color="blue",
            advice="You can increase training load or schedule a race.",
        )
    elif tsb > 5:
        return TsbReadiness(
            tsb=tsb,
            status=TsbStatus.FRESH,
            label="Fresh",
            color="green",
            advice="Good form for a hard session or a race.",
        )
    elif tsb > -10:
        return TsbReadiness(
            tsb=tsb,
            status=TsbStatus.OPTIMAL,
            label="Optimal",
            color="cyan",
            advice="Ideal balance between load and recovery.",
        )
    elif tsb > -30:
        return TsbReadiness(
            tsb=tsb,
            status=TsbStatus.TIRED,
            label="Tired",
            color="yellow",
            advice="Fatigue is building, favour recovery.",
        )
    else:
        return TsbReadiness(
            tsb=tsb,
            status=TsbStatus.EXHAUSTED,
            label="Exhausted",
            color="red",
            advice="Risk of overtraining. Rest is strongly recommended.",
        )


def interpret_recovery_score(score: float) -> RecoveryReadiness:
    """
    Classify a wearable recovery score (0-100).

    Advisory only: a red score says "not cleared" but blocks nothing.
    - >= 67: green, cleared to train
    - >= 34: yellow, cleared with caution
    - otherwise: red, not cleared
    """
    if score >= 67:
        return RecoveryReadiness(
            score=score,
            status=RecoveryStatus.GREEN,
            label="Optimal",
            color="green",
            can_train=True,
            advice="Recovered. Training is cleared.",
        )
    if score >= 34:
        return RecoveryReadiness(
            score=score,
            status=RecoveryStatus.YELLOW,
            label="Moderate",
            color="yellow",
            can_train=True,
            advice="Partially recovered. Train with caution.",
        )
    return RecoveryReadiness(
        score=score,
        status=RecoveryStatus.RED,
        label="Low",
        color="red",
        can_train=False,
        advice="Poorly recovered. Prefer rest or very easy activity.",
    )


def needs_fatigue_alert(
    tsb: float,
    threshold: Optional[float] = None,
    settings: Optional[Settings] = None,
) -> bool:
    """True when form has dropped below the coach alert threshold (-25)."""
    if threshold is None:
        threshold = (settings or get_settings()).fatigue_alert_tsb
    return tsb < threshold
