from .base import BaseExtractionService
from .factory import get_extraction_service
from .types import ExtractionResponse

__all__ = ["BaseExtractionService", "ExtractionResponse", "get_extraction_service"]
