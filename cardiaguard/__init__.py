"""
CardiaGuard - clinical feature pipeline for heart disease screening.
"""
from cardiaguard.config import APP_VERSION

__version__ = APP_VERSION
