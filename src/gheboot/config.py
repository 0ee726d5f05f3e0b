import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class Config:
    """Loads environment-tunable defaults from the environment and a local .env file."""

    load_dotenv()

    GHES_IMAGE_URL_TEMPLATE = os.getenv(
        "GHES_IMAGE_URL_TEMPLATE",
        "https://github-enterprise.s3.amazonaws.com/kvm/releases/github-enterprise-{version}.qcow2",
    )
    GHES_IMAGE_NAME_TEMPLATE = os.getenv("GHES_IMAGE_NAME_TEMPLATE", "github-enterprise-{version}.qcow2")

    # Seconds to wait after creation before looking for the VM on the network
    BOOT_WAIT = int(os.getenv("GHES_BOOT_WAIT", "60"))

    IP_ATTEMPTS = int(os.getenv("GHES_IP_ATTEMPTS", "5"))
    IP_DELAY = float(os.getenv("GHES_IP_DELAY", "5"))
    PROBE_TIMEOUT = float(os.getenv("GHES_PROBE_TIMEOUT", "0.2"))

    CONFIG_ATTEMPTS = int(os.getenv("GHES_CONFIG_ATTEMPTS", "5"))
    CONFIG_DELAY = float(os.getenv("GHES_CONFIG_DELAY", "45"))
    # Per-request timeout for the config/init POST
    CONFIG_TIMEOUT = float(os.getenv("GHES_CONFIG_TIMEOUT", "30"))

    # Placeholder user accepted by the management API during first boot
    API_USER = os.getenv("GHES_API_USER", "api_key")
    NOT_READY_MARKER = os.getenv("GHES_NOT_READY_MARKER", "Sorry")

    DATA_DISK_SIZE = os.getenv("GHES_DATA_DISK_SIZE", "200G")


@dataclass(frozen=True)
class BootOptions:
    """Immutable record of everything a single gheboot run needs.

    Built once by the CLI and handed to each component, so no component
    reads command-line or environment state on its own.
    """

    version: str
    hostname: str
    boot_storage: str
    ssd_storage: str
    cores: int = 8
    memory: int = 65535
    network: str = "vmbr0"
    cpu_type: str = "host"
    data_disk_size: str = Config.DATA_DISK_SIZE
    onboot: bool = False
    poweron: bool = False
    download: bool = False
    root_password: Optional[str] = None
    license_file: Optional[Path] = None
    ip_netmask: Optional[str] = None
    insecure: bool = False
    image_dir: Path = Path(".")
    node: Optional[str] = None

    boot_wait: float = Config.BOOT_WAIT
    ip_attempts: int = Config.IP_ATTEMPTS
    ip_delay: float = Config.IP_DELAY
    probe_timeout: float = Config.PROBE_TIMEOUT
    config_attempts: int = Config.CONFIG_ATTEMPTS
    config_delay: float = Config.CONFIG_DELAY
    config_timeout: float = Config.CONFIG_TIMEOUT

    @property
    def wants_initial_config(self) -> bool:
        """Initial configuration runs only when both credentials are supplied."""
        return bool(self.root_password) and self.license_file is not None
