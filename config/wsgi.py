import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

application = get_wsgi_application()

from django.conf import settings  # noqa: E402

if settings.SEED_ON_STARTUP:
    from apps.core.seed import bootstrap  # noqa: E402
    bootstrap()
