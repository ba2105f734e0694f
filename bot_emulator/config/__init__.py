"""Configuration module."""

from bot_emulator.config.constants import EMULATOR, EmulatorConstants
from bot_emulator.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "EmulatorConstants", "EMULATOR"]
