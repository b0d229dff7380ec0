from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Any, Dict, List


def _finite(value: Any, name: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{name} must be a finite number, got {value!r}")
    return number


class ThreatLevel(str, Enum):
    SAFE = "Safe"
    SUSPICIOUS = "Suspicious"
    HIGH_RISK = "High-Risk"
    FRAUD = "Fraud"


class Verdict(str, Enum):
    TRUST = "Trust"
    DO_NOT_TRUST = "Do NOT Trust"


@dataclass
class AnalysisResult:
    """
    Structured verdict returned by the classifier.
    Serialised with the camelCase keys the classifier itself emits.
    """
    threat_level: ThreatLevel
    reason: str
    warning: str
    final_verdict: Verdict
    safety_score: int                  # 0 (certain fraud) .. 100 (safe)
    analysis_steps: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "threatLevel": self.threat_level.value,
            "reason": self.reason,
            "warning": self.warning,
            "finalVerdict": self.final_verdict.value,
            "safetyScore": self.safety_score,
            "analysisSteps": list(self.analysis_steps),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        """
        Build a result from a classifier payload.
        Raises KeyError / ValueError / TypeError on schema violations.
        """
        score = int(round(_finite(data["safetyScore"], "safetyScore")))
        steps = data.get("analysisSteps") or []
        if not isinstance(steps, list):
            raise TypeError("analysisSteps must be a list")
        return cls(
            threat_level=ThreatLevel(data["threatLevel"]),
            reason=str(data["reason"]),
            warning=str(data.get("warning", "")),
            final_verdict=Verdict(data["finalVerdict"]),
            safety_score=min(100, max(0, score)),
            analysis_steps=[str(s) for s in steps],
        )


@dataclass
class AnalysisHistoryItem:
    """A recorded scan: the verdict plus bookkeeping for the history list."""
    result: AnalysisResult
    id: str
    timestamp: int      # epoch milliseconds
    preview: str
    type: str           # text | image | video | binary

    def to_dict(self) -> Dict[str, Any]:
        data = self.result.to_dict()
        data.update({
            "id": self.id,
            "timestamp": self.timestamp,
            "preview": self.preview,
            "type": self.type,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisHistoryItem":
        return cls(
            result=AnalysisResult.from_dict(data),
            id=str(data["id"]),
            timestamp=int(_finite(data["timestamp"], "timestamp")),
            preview=str(data.get("preview", "")),
            type=str(data.get("type", "text")),
        )
