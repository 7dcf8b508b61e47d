from django.urls import path

from . import views

app_name = 'finance'

urlpatterns = [
    path('payments/', views.record_payment, name='record_payment'),
    path('enrollments/<str:enrollment_id>/summary/', views.payment_summary, name='payment_summary'),
    path('parents/<str:parent_id>/fees/', views.parent_fees, name='parent_fees'),
]
