from piracy.infrastructure.models import PiracyAlert  # noqa: F401
