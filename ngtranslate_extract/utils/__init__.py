"""
Utils module for ngtranslate-extract
===================================
"""

from .config import ConfigManager, MarkupSettings, ScriptSettings, OutputSettings
from .encoding import read_text_safely

__all__ = [
    'ConfigManager', 'MarkupSettings', 'ScriptSettings', 'OutputSettings', 'read_text_safely'
]
