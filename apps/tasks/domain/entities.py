# apps/tasks/domain/entities.py
from dataclasses import dataclass
from typing import Optional
from enum import Enum

TASKS = 'tasks'


class TaskType(str, Enum):
    RECURRING = 'daily'
    GOAL = 'goal'


class DailyMode(str, Enum):
    CHECKLIST = 'checklist'
    MEASURED = 'number'


@dataclass
class TaskEntity:
    id: str
    name: str
    type: TaskType = TaskType.RECURRING

    # Tylko dla RECURRING
    daily_mode: Optional[DailyMode] = None
    unit: Optional[str] = None

    # Tylko dla GOAL
    target: Optional[float] = None

    description: Optional[str] = None
    tag: Optional[str] = None
    user_id: Optional[str] = None  # właściciel (tylko ID)

    @property
    def is_recurring(self) -> bool:
        return self.type == TaskType.RECURRING

    @property
    def is_measured(self) -> bool:
        return self.is_recurring and self.daily_mode == DailyMode.MEASURED
