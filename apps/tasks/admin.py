from django.contrib import admin
from .models import Task

@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('name', 'user', 'type', 'daily_mode', 'target', 'unit', 'created_at')
    list_filter = ('type', 'daily_mode')
    search_fields = ('name', 'tag')
