from django.contrib import admin
from .models import DailyLog

@admin.register(DailyLog)
class DailyLogAdmin(admin.ModelAdmin):
    list_display = ('task', 'user', 'date', 'value_bool', 'value_number')
    list_filter = ('date', 'value_bool')
    search_fields = ('task__name', 'note')
