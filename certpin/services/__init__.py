"""
Services package for the certificate pinning tool.
"""
from .config_service import ConfigService
from .logging_service import LoggingService

__all__ = ['ConfigService', 'LoggingService']
