"""Services layer for the training load engine."""

from .base import BaseService
from .load_service import TrainingLoadService, TrainingLoadSummary

__all__ = [
    "BaseService",
    "TrainingLoadService",
    "TrainingLoadSummary",
]
