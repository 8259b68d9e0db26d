"""Download operations."""

from .base import BaseOperation
from .download_result import DownloadResultOperation
from .download_script import DownloadScriptOperation

__all__ = ["BaseOperation", "DownloadResultOperation", "DownloadScriptOperation"]
