"""Create and boot the appliance VM as one ordered sequence of control-plane calls."""

import logging
from functools import partial
from typing import Callable, List, Tuple

from gheboot.errors import CommandFailedError, ProvisioningError
from gheboot.models import VMDefinition
from gheboot.proxmox_cli import ProxmoxCLI

logger = logging.getLogger(__name__)


class ApplianceProvisioner:
    """Drives VM creation through a ProxmoxCLI.

    Each step either succeeds or aborts the whole sequence. Nothing already
    created is rolled back.
    """

    def __init__(self, client: ProxmoxCLI):
        self.client = client

    def steps(self, vm: VMDefinition) -> List[Tuple[str, Callable[[], None]]]:
        """Ordered (failure message, action) pairs for ``vm``."""
        client = self.client
        steps: List[Tuple[str, Callable[[], None]]] = [
            (f"Failed to create '{vm.hostname}' ({vm.vmid})", partial(client.create_vm, vm)),
            (
                "Failed to import root disk",
                partial(client.import_disk, vm.vmid, str(vm.image_path), vm.boot_storage),
            ),
            (
                "Failed to configure boot disk",
                partial(client.attach_disk, vm.vmid, "scsi0", f"{vm.boot_storage}:{vm.boot_volume}"),
            ),
            ("Failed to configure boot order", partial(client.set_boot_order, vm.vmid, "scsi0")),
            (
                "Failed to allocate storage disk",
                partial(client.allocate_storage, vm.ssd_storage, vm.vmid, vm.data_volume, vm.data_disk_size),
            ),
            (
                "Failed to configure storage disk",
                partial(
                    client.attach_disk,
                    vm.vmid,
                    "scsi1",
                    f"{vm.ssd_storage}:{vm.data_volume},discard=on,ssd=1",
                    scsihw="virtio-scsi-pci",
                ),
            ),
        ]
        if vm.poweron:
            steps.append(("Failed to boot", partial(client.start_vm, vm.vmid)))
        return steps

    def provision(self, vm: VMDefinition) -> None:
        """
        Create, wire up storage for and optionally start ``vm``.

        Raises:
            ProvisioningError: With a step-specific message when a command fails
        """
        logger.info(
            f"🆕 Creating VM {vm.hostname!r} (vmid={vm.vmid}): {vm.cores} cores, {vm.memory}MB RAM, "
            f"{vm.data_disk_size} data disk on {vm.ssd_storage}"
        )
        for message, action in self.steps(vm):
            try:
                action()
            except CommandFailedError as e:
                logger.error(f"{message}: {e}")
                raise ProvisioningError(message) from e

        if vm.poweron:
            logger.info(f"▶️  VM {vm.hostname!r} (vmid={vm.vmid}) started")
        else:
            logger.info(f"✅ VM {vm.hostname!r} (vmid={vm.vmid}) created, not powered on")
