# apps/goals/domain/entities.py
from dataclasses import dataclass
from typing import Any, Dict, Optional

from apps.core.domain.dates import day_key

GOAL_PROGRESS = 'goal_progress'


@dataclass
class GoalProgressEntity:
    id: str
    task_id: str
    user_id: str
    day: str
    value: float = 0.0

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> 'GoalProgressEntity':
        return cls(
            id=str(record['id']),
            task_id=str(record['task']),
            user_id=str(record['user']),
            day=day_key(record['date']),
            value=float(record.get('value') or 0),
        )


@dataclass
class GoalSummary:
    task_id: str
    current: float = 0.0
    target: Optional[float] = None
    unit: Optional[str] = None

    @property
    def percentage(self) -> float:
        """Postęp w procentach (0-100), przycięty do 100."""
        if not self.target or self.target <= 0:
            return 0.0
        return min(self.current / self.target * 100, 100.0)

    @property
    def is_complete(self) -> bool:
        return self.current >= (self.target or 0)
