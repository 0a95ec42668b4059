"""Pure dataclasses for the research pipeline. No I/O, no deps."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from src.providers.base import CapabilityClient


@dataclass(frozen=True)
class SubQuestion:
    question: str
    relevance: str = ""


@dataclass(frozen=True)
class Engine:
    id: str                    # e.g. "OpenAI Deep Research"
    persona: str               # system instruction sent with every call
    client: CapabilityClient = field(repr=False, compare=False)


@dataclass(frozen=True)
class Ok:
    content: str


@dataclass(frozen=True)
class Err:
    message: str


EngineResponse = Ok | Err


def render_response(response: EngineResponse) -> str:
    """Flatten an EngineResponse to displayable text."""
    if isinstance(response, Ok):
        return response.content
    return f"Error: {response.message}"


@dataclass(frozen=True)
class Parsed:
    value: Any


@dataclass(frozen=True)
class Unparsed:
    raw_text: str


ParseResult = Parsed | Unparsed


# Field name -> wire key, in report order.
REPORT_KEYS: dict[str, str] = {
    "executive_summary": "executiveSummary",
    "key_findings": "keyFindings",
    "tool_comparison": "toolComparison",
    "risks_uncertainties": "risksUncertainties",
    "recommendations": "recommendations",
}


@dataclass(frozen=True)
class SynthesisReport:
    executive_summary: str
    key_findings: str
    tool_comparison: str
    risks_uncertainties: str
    recommendations: str
    full_synthesis_raw: str | None = None  # only set on the degraded-parse path

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> SynthesisReport:
        return cls(**{attr: data[key] for attr, key in REPORT_KEYS.items()})

    def to_dict(self) -> dict[str, str]:
        out = {key: getattr(self, attr) for attr, key in REPORT_KEYS.items()}
        if self.full_synthesis_raw is not None:
            out["fullSynthesisRaw"] = self.full_synthesis_raw
        return out


@dataclass
class PipelineResult:
    report: SynthesisReport
    sub_questions: list[str] = field(default_factory=list)
    tool_responses: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.report.to_dict(),
            "subQuestions": list(self.sub_questions),
            "toolResponses": dict(self.tool_responses),
        }
