# vsixforge/core/errors.py
from __future__ import annotations

__all__ = [
    "VsixForgeError",
    "ResolutionError",
    "CommandError",
    "FilterError",
    "ProcessorError",
    "AssemblyError",
    "ManifestError",
]



class VsixForgeError(Exception):
    """Base class for every failure that aborts a packaging run."""
    pass



class ResolutionError(VsixForgeError):
    """Production dependency resolution failed. Raised before any file I/O."""
    pass



class CommandError(ResolutionError):
    """
    An external dependency-lister process exited with a non-zero status.

    Keeps the command line, exit code and captured stderr so callers can
    report what the package manager said.
    """
    def __init__(self, command: str, returnCode: int, stderr: str = ""):
        detail = stderr.strip()
        msg = f"Command failed with exit code {returnCode}: {command}"
        if detail:
            msg += f"\n{detail}"
        super().__init__(msg)
        self.command = command
        self.returnCode = returnCode
        self.stderr = stderr



class FilterError(VsixForgeError):
    """Ignore rules could not be loaded (explicitly requested ignore file missing)."""
    pass



class ProcessorError(VsixForgeError):
    """A content processor rejected a file or the manifest."""
    pass



class AssemblyError(VsixForgeError):
    """Rendering the package descriptors or writing the archive failed."""
    pass



class ManifestError(VsixForgeError):
    """The project manifest is missing, unreadable or invalid."""
    pass
