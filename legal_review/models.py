"""Domain models shared by the review services and the API."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RiskType(str, Enum):
    """Risk categories a review can be asked to cover"""
    POLICY = "policy"
    FINANCIAL = "financial"
    EXECUTION = "execution"


class RiskLevel(str, Enum):
    """Severity rubric used by the model"""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Stance(str, Enum):
    """Party perspective the review is conducted from"""
    PARTY_A = "partyA"
    PARTY_B = "partyB"


class Provider(str, Enum):
    """Supported OpenAI-compatible chat providers"""
    DEEPSEEK = "deepseek"
    DOUBAO = "doubao"
    TONGYI = "tongyi"


RISK_TYPE_LABELS = {
    RiskType.POLICY: "Policy risk",
    RiskType.FINANCIAL: "Financial risk",
    RiskType.EXECUTION: "Execution risk",
}

RISK_LEVEL_LABELS = {
    RiskLevel.HIGH: "High risk",
    RiskLevel.MEDIUM: "Medium risk",
    RiskLevel.LOW: "Low risk",
}

# Labels models tend to emit instead of the enum values
_RISK_TYPE_ALIASES = {
    "policy risk": "policy",
    "政策风险": "policy",
    "政策": "policy",
    "financial risk": "financial",
    "财务风险": "financial",
    "财务": "financial",
    "execution risk": "execution",
    "执行风险": "execution",
    "执行": "execution",
}

_RISK_LEVEL_ALIASES = {
    "high risk": "high",
    "高风险": "high",
    "高": "high",
    "medium risk": "medium",
    "moderate": "medium",
    "中等风险": "medium",
    "中风险": "medium",
    "中": "medium",
    "low risk": "low",
    "低风险": "low",
    "低": "low",
}


class ProviderConfig(BaseModel):
    """Provider selection supplied by the caller for one session."""
    model_config = ConfigDict(frozen=True)

    provider: str = Field(..., description="Provider key: deepseek, doubao or tongyi")
    api_key: str = Field(default="", description="Bearer token for the provider")
    model: Optional[str] = Field(default=None, description="Model or endpoint ID override")


class TextWindow(BaseModel):
    """One review unit in standard mode."""
    model_config = ConfigDict(frozen=True)

    start_offset: int
    text: str

    @property
    def end_offset(self) -> int:
        return self.start_offset + len(self.text)


class ChecklistRow(BaseModel):
    """One review unit in outline mode."""
    model_config = ConfigDict(frozen=True)

    row: int
    item_name: str
    description: str = ""


class ReviewFinding(BaseModel):
    """One structured risk record extracted from a model reply."""
    original_text_snippet: str = ""
    risk_type: RiskType
    risk_level: RiskLevel
    reason: str = ""
    suggestion: str = ""

    @field_validator("risk_type", mode="before")
    @classmethod
    def _normalize_risk_type(cls, value):
        if isinstance(value, str):
            key = value.strip().lower()
            return _RISK_TYPE_ALIASES.get(key, key)
        return value

    @field_validator("risk_level", mode="before")
    @classmethod
    def _normalize_risk_level(cls, value):
        if isinstance(value, str):
            key = value.strip().lower()
            return _RISK_LEVEL_ALIASES.get(key, key)
        return value

    @field_validator("original_text_snippet", "reason", "suggestion", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)


class OutlineAnswer(BaseModel):
    """Answer for one checklist row; result holds an error message on failure."""
    row: int
    item_name: str
    description: str = ""
    result: str = ""


class ReviewOutcome(BaseModel):
    """Aggregate of a standard-mode review run."""
    reviews: List[ReviewFinding] = Field(default_factory=list)
    logs: List[str] = Field(default_factory=list)
    chunk_count: int = 0
    failed_units: int = 0


class OutlineOutcome(BaseModel):
    """Aggregate of an outline-mode review run."""
    answers: List[OutlineAnswer] = Field(default_factory=list)
    logs: List[str] = Field(default_factory=list)
    failed_units: int = 0
