# apps/goals/models.py
from django.db import models
from django.conf import settings


class GoalProgress(models.Model):
    # Bez unikalności: postęp celu to suma wszystkich wpisów
    task = models.ForeignKey('tasks.Task', on_delete=models.CASCADE, related_name='goal_progress')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    date = models.DateField()
    value = models.FloatField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date']

    def __str__(self):
        return f"{self.task}: +{self.value} ({self.date})"
