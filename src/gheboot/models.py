"""Data models for appliance provisioning and initial configuration."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass(frozen=True)
class VMDefinition:
    """Parameters of the appliance VM, fixed once the ID is allocated."""

    vmid: int
    version: str
    hostname: str
    boot_storage: str
    ssd_storage: str
    image_path: Path
    cores: int = 8
    memory: int = 65535
    network: str = "vmbr0"
    cpu_type: str = "host"
    data_disk_size: str = "200G"
    onboot: bool = False
    poweron: bool = False

    @property
    def boot_volume(self) -> str:
        return f"vm-{self.vmid}-disk-0"

    @property
    def data_volume(self) -> str:
        return f"vm-{self.vmid}-disk-1"


@dataclass(frozen=True)
class ConfigurationAttempt:
    """One POST to the management API and how its response was classified."""

    number: int
    body: str
    not_ready: bool


@dataclass
class ConfigurationOutcome:
    """Result of the initial-configuration retry loop."""

    ip: str
    attempts: List[ConfigurationAttempt] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True when the last attempt did not carry the not-ready marker."""
        return bool(self.attempts) and not self.attempts[-1].not_ready

    @property
    def setup_url(self) -> str:
        return f"https://{self.ip}:8443/setup"


@dataclass
class BootResult:
    """Summary of a full gheboot run."""

    vmid: int
    hostname: str
    ip: Optional[str] = None
    configuration: Optional[ConfigurationOutcome] = None
    initial_config_requested: bool = False

    @property
    def configured(self) -> bool:
        return self.configuration is not None and self.configuration.success
