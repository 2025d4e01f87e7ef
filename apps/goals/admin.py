from django.contrib import admin
from .models import GoalProgress

@admin.register(GoalProgress)
class GoalProgressAdmin(admin.ModelAdmin):
    list_display = ('task', 'user', 'date', 'value')
    list_filter = ('date',)
