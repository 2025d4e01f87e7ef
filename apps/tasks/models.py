# apps/tasks/models.py
from django.db import models
from django.conf import settings


class Task(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    name = models.CharField(max_length=200)
    description = models.TextField(null=True, blank=True)
    tag = models.CharField(max_length=100, null=True, blank=True)

    # TextChoices dla Admina, mapowane na Enum domenowy (TaskType / DailyMode)
    class TypeChoices(models.TextChoices):
        DAILY = 'daily', 'Recurring'
        GOAL = 'goal', 'Goal'

    class DailyModeChoices(models.TextChoices):
        CHECKLIST = 'checklist', 'Checklist'
        NUMBER = 'number', 'Measured'

    type = models.CharField(
        max_length=10,
        choices=TypeChoices.choices,
        default=TypeChoices.DAILY
    )
    daily_mode = models.CharField(
        max_length=10,
        choices=DailyModeChoices.choices,
        null=True, blank=True,
        help_text="Tylko dla zadań cyklicznych"
    )

    # Cel liczbowy (tylko dla typu goal) i jednostka
    target = models.FloatField(null=True, blank=True)
    unit = models.CharField(max_length=50, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name
