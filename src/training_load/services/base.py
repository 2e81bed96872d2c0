"""
Base service class.

Services are stateless wrappers around the pure metric functions. They hold
injected settings and a logger, nothing else.
"""

import logging
from typing import Optional

from ..config import Settings, get_settings


class BaseService:
    """
    Base class for engine services.

    Provides common functionality:
    - Logging setup
    - Settings injection
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    @property
    def logger(self) -> logging.Logger:
        """Get the logger instance."""
        return self._logger

    @property
    def settings(self) -> Settings:
        """Get the settings in use."""
        return self._settings
