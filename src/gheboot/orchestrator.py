"""Sequencing of a full appliance boot: provision, wait, discover, configure."""

import logging
import time
from typing import Callable, Optional

from gheboot.config import BootOptions
from gheboot.configurator import InitialConfigClient
from gheboot.host_network import HostNetwork
from gheboot.image_manager import ImageManager
from gheboot.models import BootResult, VMDefinition
from gheboot.prober import NeighborProber
from gheboot.provisioner import ApplianceProvisioner
from gheboot.proxmox_cli import ProxmoxCLI, QmCommandClient
from gheboot.subnet import SubnetDescriptor

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs the provisioning sequence for one BootOptions record."""

    def __init__(
        self,
        options: BootOptions,
        client: ProxmoxCLI,
        prober: NeighborProber,
        configurator: InitialConfigClient,
        images: ImageManager,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.options = options
        self.client = client
        self.provisioner = ApplianceProvisioner(client)
        self.prober = prober
        self.configurator = configurator
        self.images = images
        self.sleep = sleep

    @classmethod
    def from_options(cls, options: BootOptions) -> "Orchestrator":
        """Wire the real command-line and HTTPS collaborators for ``options``."""
        client = QmCommandClient(node=options.node)
        prober = NeighborProber(
            client,
            HostNetwork(),
            attempts=options.ip_attempts,
            delay=options.ip_delay,
            probe_timeout=options.probe_timeout,
        )
        configurator = InitialConfigClient(
            attempts=options.config_attempts,
            delay=options.config_delay,
            insecure=options.insecure,
            timeout=options.config_timeout,
        )
        return cls(options, client, prober, configurator, ImageManager(options.image_dir))

    def build_vm(self, vmid: int) -> VMDefinition:
        opts = self.options
        return VMDefinition(
            vmid=vmid,
            version=opts.version,
            hostname=opts.hostname,
            boot_storage=opts.boot_storage,
            ssd_storage=opts.ssd_storage,
            image_path=self.images.path_for(opts.version),
            cores=opts.cores,
            memory=opts.memory,
            network=opts.network,
            cpu_type=opts.cpu_type,
            data_disk_size=opts.data_disk_size,
            onboot=opts.onboot,
            poweron=opts.poweron,
        )

    def run(self) -> BootResult:
        """
        Provision the appliance and, when credentials were given, configure it.

        Fatal failures (missing tools, failed commands, missing image) raise
        GhebootError subclasses. Failing to find the IP or exhausting the
        configuration retries is reported through the returned BootResult.
        """
        opts = self.options

        vmid = self.client.allocate_next_id()
        logger.info(f"🔢 Allocated VM ID {vmid}")

        if opts.download:
            self.images.download(opts.version)
        self.images.require(opts.version)

        vm = self.build_vm(vmid)
        self.provisioner.provision(vm)

        result = BootResult(vmid=vmid, hostname=opts.hostname, initial_config_requested=opts.wants_initial_config)
        if not opts.wants_initial_config:
            return result

        if not opts.poweron:
            logger.warning("⚠️  VM was not powered on, initial configuration will likely fail")

        logger.info(f"⏳ Waiting {opts.boot_wait}s for VM to boot...")
        self.sleep(opts.boot_wait)

        subnet: Optional[SubnetDescriptor] = None
        if opts.ip_netmask:
            subnet = SubnetDescriptor.parse(opts.ip_netmask)

        result.ip = self.prober.find_ip(vmid, subnet)
        if result.ip is None:
            return result

        result.configuration = self.configurator.configure(
            result.ip,
            opts.root_password,  # type: ignore[arg-type]
            opts.license_file,  # type: ignore[arg-type]
        )
        return result
