"""
ASGI config for DigitalLicenseService project.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "DigitalLicenseService.settings.dev")

application = get_asgi_application()
