from django.urls import path

from . import views

app_name = 'admission'

urlpatterns = [
    path('enroll/', views.submit_enrollment, name='enroll'),
    path('offline/', views.offline_enrollment, name='offline'),
    path('<str:enrollment_id>/status/', views.update_status, name='update_status'),
]
