"""Web request/response models for Flask application."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ChatRequest:
    """Incoming discovery answer."""

    message: Any

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "ChatRequest":
        """Create from JSON request. Multi-select answers arrive as a list."""
        data = data or {}
        return cls(message=data.get("message", ""))


@dataclass
class EstimateRequest:
    """Estimate for the session's discovered workload, or for an explicit one."""

    currency: str = "USD"
    model: Optional[str] = None
    workload: Optional[Dict[str, Any]] = None

    @classmethod
    def from_json(cls, data: Optional[Dict[str, Any]]) -> "EstimateRequest":
        data = data or {}
        workload = data.get("workload")
        return cls(
            currency=str(data.get("currency") or "USD"),
            model=data.get("model"),
            workload=dict(workload) if isinstance(workload, dict) else None,
        )


@dataclass
class ChatResponse:
    """Response to a discovery answer."""

    response: str
    is_done: bool
    question: Optional[Dict[str, Any]] = None
    extracted_data: Dict[str, Any] = field(default_factory=dict)
    summary: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None

    @classmethod
    def from_result(cls, result: Dict[str, Any]) -> "ChatResponse":
        return cls(
            response=result.get("response", ""),
            is_done=bool(result.get("is_done", False)),
            question=result.get("question"),
            extracted_data=result.get("extracted_data") or {},
            summary=result.get("summary"),
            error=result.get("error"),
            error_type=result.get("error_type"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result = {
            "response": self.response,
            "is_done": self.is_done,
            "question": self.question,
            "extracted_data": self.extracted_data,
            "summary": self.summary,
        }
        if self.error:
            result["error"] = self.error
            if self.error_type:
                result["error_type"] = self.error_type
        return result
