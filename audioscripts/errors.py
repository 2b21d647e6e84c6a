from __future__ import annotations

class AudioScriptsError(Exception):
    """Base error for the audio-scripts tools."""


class ContainerOpenError(AudioScriptsError):
    """Raised when an audio file (or its sidecar) is missing or malformed."""


class ContainerReadOnlyError(AudioScriptsError):
    """Raised when a container opened read-only is asked to mutate."""


class UnsupportedOperation(AudioScriptsError, NotImplementedError):
    """Raised when a container variant lacks the requested capability."""


class SidecarCopyError(AudioScriptsError):
    """Raised when a correlated sidecar file is missing or cannot be copied."""


class CueSheetError(AudioScriptsError):
    """Raised when a cue sheet cannot be parsed."""


class FileListError(AudioScriptsError, FileNotFoundError):
    """Raised when the batch file list cannot be read."""


class CatalogError(AudioScriptsError):
    """Raised when downloading from the content catalog fails."""


class ResourceContainerError(AudioScriptsError):
    """Raised when a resource container archive is unreadable."""
