"""
src/gheboot/proxmox_cli.py

Proxmox VE control-plane access through the qm, pvesm and pvesh command-line tools.
"""

import json
import logging
import shutil
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from gheboot.errors import CommandFailedError, MissingToolError
from gheboot.models import VMDefinition

logger = logging.getLogger(__name__)

Runner = Callable[..., str]


def run_command(args: List[str], timeout: Optional[float] = None) -> str:
    """
    Run an external tool and return its stripped stdout.

    Args:
        args: Command and arguments, e.g. ["qm", "start", "101"]
        timeout: Optional timeout in seconds

    Returns:
        Standard output of the command

    Raises:
        MissingToolError: If the executable is not on PATH
        CommandFailedError: If the command exits non-zero or times out
    """
    if shutil.which(args[0]) is None:
        raise MissingToolError(args[0])

    logger.debug(f"Running: {' '.join(args)}")
    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
    except subprocess.TimeoutExpired:
        raise CommandFailedError(args, None, f"timed out after {timeout}s")

    if result.returncode != 0:
        raise CommandFailedError(args, result.returncode, (result.stderr or "").strip())

    return (result.stdout or "").strip()


class ProxmoxCLI(ABC):
    """Capabilities the provisioner and prober need from the virtualization platform."""

    @abstractmethod
    def allocate_next_id(self) -> int: ...

    @abstractmethod
    def create_vm(self, vm: VMDefinition) -> None: ...

    @abstractmethod
    def import_disk(self, vmid: int, image_path: str, storage: str) -> None: ...

    @abstractmethod
    def attach_disk(self, vmid: int, slot: str, volume: str, **options: str) -> None: ...

    @abstractmethod
    def set_boot_order(self, vmid: int, order: str) -> None: ...

    @abstractmethod
    def allocate_storage(self, storage: str, vmid: int, volume: str, size: str) -> None: ...

    @abstractmethod
    def start_vm(self, vmid: int) -> None: ...

    @abstractmethod
    def get_vm_config(self, vmid: int) -> Dict[str, Any]: ...


class QmCommandClient(ProxmoxCLI):
    """ProxmoxCLI backed by the qm/pvesm/pvesh tools on the local hypervisor."""

    def __init__(self, node: Optional[str] = None, runner: Runner = run_command):
        self.runner = runner
        self._node = node

    @property
    def node(self) -> str:
        """Proxmox node name, defaulting to the local hostname."""
        if self._node is None:
            self._node = self.runner(["hostname"])
        return self._node

    def allocate_next_id(self) -> int:
        return int(self.runner(["pvesh", "get", "/cluster/nextid"]))

    def create_vm(self, vm: VMDefinition) -> None:
        self.runner(
            [
                "qm",
                "create",
                str(vm.vmid),
                "--name",
                vm.hostname,
                "--net0",
                f"virtio,bridge={vm.network}",
                "--ostype",
                "l26",
                "--memory",
                str(vm.memory),
                "--onboot",
                "yes" if vm.onboot else "no",
                "--cpu",
                f"cputype={vm.cpu_type}",
                "--sockets",
                "1",
                "--cores",
                str(vm.cores),
                "--vga",
                "qxl",
            ]
        )

    def import_disk(self, vmid: int, image_path: str, storage: str) -> None:
        self.runner(["qm", "importdisk", str(vmid), image_path, storage])

    def attach_disk(self, vmid: int, slot: str, volume: str, **options: str) -> None:
        # Extra options become leading qm set flags, e.g. scsihw="virtio-scsi-pci"
        args = ["qm", "set", str(vmid)]
        for key, value in options.items():
            args += [f"--{key}", value]
        args += [f"--{slot}", volume]
        self.runner(args)

    def set_boot_order(self, vmid: int, order: str) -> None:
        self.runner(["qm", "set", str(vmid), "--boot", f"order={order}"])

    def allocate_storage(self, storage: str, vmid: int, volume: str, size: str) -> None:
        self.runner(["pvesm", "alloc", storage, str(vmid), volume, size])

    def start_vm(self, vmid: int) -> None:
        self.runner(["qm", "start", str(vmid)])

    def get_vm_config(self, vmid: int) -> Dict[str, Any]:
        output = self.runner(
            ["pvesh", "get", f"/nodes/{self.node}/qemu/{vmid}/config", "--output-format", "json"]
        )
        return json.loads(output)  # type: ignore[no-any-return]
