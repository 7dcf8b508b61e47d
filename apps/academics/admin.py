from django.contrib import admin
from .models import Subject, Course, Note


@admin.register(Subject)
class SubjectAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'class_level')
    list_filter = ('class_level',)
    search_fields = ('name',)


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ('name', 'class_level', 'batch', 'course_type', 'fee', 'is_active')
    list_filter = ('class_level', 'course_type', 'is_active')
    search_fields = ('name',)


@admin.register(Note)
class NoteAdmin(admin.ModelAdmin):
    list_display = ('title', 'class_level', 'batch', 'subject', 'uploaded_by', 'uploaded_date')
    list_filter = ('class_level', 'batch')
    search_fields = ('title', 'description')
    date_hierarchy = 'uploaded_date'
