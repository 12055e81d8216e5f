"""Local patient and appointment records for a small clinic."""

from .services.clinic_service import ClinicData

__version__ = "1.0.0"

__all__ = ["ClinicData", "__version__"]
