# apps/tasks/ports/repositories.py
from abc import ABC, abstractmethod
from typing import List, Optional
from apps.tasks.domain.entities import TaskEntity, TaskType


class ITaskRepository(ABC):
    @abstractmethod
    def get_by_id(self, task_id: str) -> Optional[TaskEntity]:
        pass

    @abstractmethod
    def list_for_user(self, user_id: str, task_type: Optional[TaskType] = None) -> List[TaskEntity]:
        """Zwraca zadania użytkownika (najnowsze najpierw), opcjonalnie tylko danego typu."""
        pass
