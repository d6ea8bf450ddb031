"""Domain enums for the build tool."""
from enum import Enum


class AssetType(Enum):
    """Preload asset kinds."""
    JAVASCRIPT = "javascript"
    STYLESHEET = "stylesheet"
    HTML = "html"


class PackageType(Enum):
    """Package descriptor types with special handling."""
    APPLICATION = "application"
    EXTENSION = "extension"
    SERVICE = "service"


class ThemeCategory(Enum):
    """Theme collections under src/themes."""
    FONTS = "fonts"
    ICONS = "icons"
    SOUNDS = "sounds"
    STYLES = "styles"
