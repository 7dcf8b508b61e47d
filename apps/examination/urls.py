from django.urls import path

from . import views

app_name = 'examination'

urlpatterns = [
    path('ranking/', views.class_ranking, name='ranking'),
    path('students/<str:student_id>/report/', views.student_report, name='student_report'),
    path('result/', views.public_result, name='public_result'),
]
