"""
System components for voyagemath.
"""

from voyagemath.components.config import Config, ConfigManager
