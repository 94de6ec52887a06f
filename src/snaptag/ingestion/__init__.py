"""Image discovery for snaptag collections."""

from .discovery import DirectoryScanner, ScanResult

__all__ = ["DirectoryScanner", "ScanResult"]
