"""Exceptions raised while provisioning a GHES appliance."""

from typing import List, Optional


class GhebootError(Exception):
    """Base exception for provisioning failures."""

    pass


class MissingToolError(GhebootError):
    """Raised when a required command-line tool is not installed."""

    def __init__(self, tool: str):
        self.tool = tool
        super().__init__(f"Command '{tool}' not found")


class CommandFailedError(GhebootError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: List[str], returncode: Optional[int], stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        message = f"'{' '.join(command)}' exited with status {returncode}"
        if stderr:
            message += f": {stderr}"
        super().__init__(message)


class ProvisioningError(GhebootError):
    """Raised when a step of the VM provisioning sequence fails."""

    pass


class DiskImageNotFoundError(GhebootError):
    """Raised when the appliance disk image is missing locally."""

    pass


class DownloadError(GhebootError):
    """Raised when the appliance disk image cannot be downloaded."""

    pass


class DiscoveryError(GhebootError):
    """Raised when the VM configuration lacks the data needed for IP discovery."""

    pass


class InvalidSubnetError(GhebootError, ValueError):
    """Raised for malformed CIDR input."""

    pass
