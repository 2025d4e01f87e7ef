# apps/daily_logs/domain/services/__init__.py
from .existence import DailyLogProber
from .creation import DailyLogCreator
from .reconciliation import DailyLogReconciler
from .mutation import DailyLogMutator

__all__ = ['DailyLogProber', 'DailyLogCreator', 'DailyLogReconciler', 'DailyLogMutator']
