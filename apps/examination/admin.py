from django.contrib import admin
from .models import Mark


@admin.register(Mark)
class MarkAdmin(admin.ModelAdmin):
    list_display = ('student', 'subject', 'exam_type', 'marks', 'max_marks', 'grade', 'date')
    list_filter = ('exam_type', 'class_level', 'subject')
    search_fields = ('student__name', 'student__register_number', 'subject__name')
    date_hierarchy = 'date'
    raw_id_fields = ('student',)
