"""
Models for the token research workflow.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ResearchStatus(str, Enum):
    WAITING = "waiting"
    PROCESSING = "processing"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class ResearchStep:
    id: str
    title: str
    description: str
    status: ResearchStatus = ResearchStatus.WAITING
    message: Optional[str] = None
    result: Any = None
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "message": self.message,
            "result": self.result,
            "timestamp": self.timestamp,
        }
