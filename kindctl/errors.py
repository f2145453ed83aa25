"""Exception types raised by kindctl."""
from typing import Optional, Sequence


class KindctlError(Exception):
    """Base class for all kindctl errors."""
    pass


class InvalidNameError(KindctlError):
    """Raised when a cluster name does not match the allowed format."""
    pass


class ConfigError(KindctlError):
    """Raised when a cluster configuration cannot be loaded or is invalid."""
    pass


class ProvisioningError(KindctlError):
    """Raised when the provider fails to create node infrastructure."""
    pass


class PipelineStepError(KindctlError):
    """Raised by a bootstrap action when it cannot complete."""
    pass


class ExportError(KindctlError):
    """Raised when the kubeconfig for a running cluster cannot be exported."""
    pass


class CommandError(KindctlError):
    """Raised when a host or node command exits non-zero."""

    def __init__(self, args: Sequence[str], returncode: int, output: Optional[str] = None):
        self.args_list = list(args)
        self.returncode = returncode
        self.output = output or ""
        message = f"command \"{' '.join(self.args_list)}\" failed with exit code {returncode}"
        if self.output.strip():
            message += f": {self.output.strip()}"
        super().__init__(message)
