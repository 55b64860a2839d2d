"""User CSS theme pipeline exports."""

from themecord.themes.crypto import AesGcmSafeStorage, EncryptionGate, PlaintextStorage
from themecord.themes.extensions import load_chromium_extensions
from themecord.themes.fetcher import ContentFetcher
from themecord.themes.importer import ThemeImporter
from themecord.themes.imports import ImportResolver, parse_imports
from themecord.themes.loader import ThemeLoader
from themecord.themes.models import LoadReport, RenderTarget
from themecord.themes.transform import importantize

__all__ = [
    "AesGcmSafeStorage",
    "ContentFetcher",
    "EncryptionGate",
    "ImportResolver",
    "LoadReport",
    "PlaintextStorage",
    "RenderTarget",
    "ThemeImporter",
    "ThemeLoader",
    "importantize",
    "load_chromium_extensions",
    "parse_imports",
]
