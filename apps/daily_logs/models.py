# apps/daily_logs/models.py
from django.db import models
from django.conf import settings


class DailyLog(models.Model):
    task = models.ForeignKey('tasks.Task', on_delete=models.CASCADE, related_name='daily_logs')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE)
    date = models.DateField()

    value_bool = models.BooleanField(null=True, blank=True)
    value_number = models.FloatField(null=True, blank=True)
    note = models.TextField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('task', 'user', 'date')  # Jeden wpis na dzień
        ordering = ['-date']

    def __str__(self):
        return f"{self.task} @ {self.date}"
