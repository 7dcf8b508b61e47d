# admin.py
from django.contrib import admin
from .models import Attendance

@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ('student', 'class_level', 'date', 'status', 'marked_by')
    list_filter = ('status', 'date', 'class_level')
    search_fields = ('student__name', 'student__register_number')
    date_hierarchy = 'date'
    ordering = ('-date',)
    raw_id_fields = ('student',)
