from django.contrib import admin
from .models import Student, Parent


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ('register_number', 'name', 'class_level', 'batch', 'roll_number', 'category')
    list_filter = ('class_level', 'batch', 'category')
    search_fields = ('name', 'email', 'register_number')
    ordering = ('class_level', 'batch', 'roll_number')

    def get_readonly_fields(self, request, obj=None):
        if obj and obj.register_number:
            return ('register_number',)
        return ()


@admin.register(Parent)
class ParentAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'phone')
    search_fields = ('name', 'email', 'children__name')
    filter_horizontal = ('children',)
