from django.urls import path

from . import views

app_name = 'attendance'

urlpatterns = [
    path('mark/', views.mark_attendance, name='mark'),
    path('mark-all/', views.mark_all_present, name='mark_all'),
    path('class/', views.save_class_attendance, name='save_class'),
    path('scan/', views.scan_attendance, name='scan'),
    path('stats/', views.class_stats, name='stats'),
    path('students/<str:student_id>/rate/', views.student_rate, name='student_rate'),
]
