from catalog.infrastructure.models import DigitalProduct  # noqa: F401
