from django.urls import path, include
from django.contrib import admin

urlpatterns = [
    path('admin/', admin.site.urls),

    # Dashboard
    path('', include('apps.core.urls')),

    # Apps
    path('admission/', include('apps.admission.urls')),
    path('finance/', include('apps.finance.urls')),
    path('attendance/', include('apps.attendance.urls')),
    path('examination/', include('apps.examination.urls')),
]

handler404 = 'apps.core.views.handler404'
handler500 = 'apps.core.views.handler500'
