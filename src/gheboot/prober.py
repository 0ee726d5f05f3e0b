"""Find a freshly booted VM's IP address through the hypervisor's neighbor table."""

import logging
import time
from typing import Callable, Iterable, Optional

from gheboot.errors import DiscoveryError
from gheboot.host_network import HostNetwork
from gheboot.polling import poll_until
from gheboot.proxmox_cli import ProxmoxCLI
from gheboot.subnet import SubnetDescriptor

logger = logging.getLogger(__name__)

LINK_LOCAL_MARKER = "fe80"


def parse_mac(net0: str) -> str:
    """Extract the MAC from a Proxmox NIC spec like ``virtio=BC:24:11:AA:BB:CC,bridge=vmbr0``."""
    model = net0.split(",")[0]
    _, sep, mac = model.partition("=")
    if not sep or not mac:
        raise DiscoveryError(f"No hardware address in network device {net0!r}")
    return mac


def match_neighbor(mac: str, entries: Iterable[str]) -> Optional[str]:
    """
    Return the address of the first neighbor entry mentioning ``mac``.

    Matching is a case-insensitive substring test and link-local entries are
    skipped.
    """
    needle = mac.lower()
    for entry in entries:
        line = entry.lower()
        if needle not in line or LINK_LOCAL_MARKER in line:
            continue
        fields = entry.split()
        if fields:
            return fields[0]
    return None


class NeighborProber:
    """Sweeps a subnet with pings, then polls the neighbor table for the VM's MAC."""

    def __init__(
        self,
        client: ProxmoxCLI,
        network: HostNetwork,
        attempts: int = 5,
        delay: float = 5,
        probe_timeout: float = 0.2,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.network = network
        self.attempts = attempts
        self.delay = delay
        self.probe_timeout = probe_timeout
        self.sleep = sleep

    def sweep(self, subnet: SubnetDescriptor) -> None:
        """Ping every address in ``subnet`` once so the neighbor cache fills in."""
        logger.info(f"📡 Sweeping {subnet} ({len(subnet)} addresses) to populate the neighbor table")
        for ip in subnet:
            self.network.ping(ip, timeout=self.probe_timeout)

    def read_mac(self, vmid: int) -> str:
        config = self.client.get_vm_config(vmid)
        net0 = config.get("net0")
        if not net0:
            raise DiscoveryError(f"VM {vmid} has no net0 device")
        return parse_mac(net0)

    def find_ip(self, vmid: int, subnet: Optional[SubnetDescriptor] = None) -> Optional[str]:
        """
        Discover the IP address of VM ``vmid``.

        Args:
            vmid: VM to look for
            subnet: Network to sweep first; without one only the existing
                neighbor cache is consulted

        Returns:
            The first matching address, or None after all polling rounds
        """
        if subnet is not None:
            self.sweep(subnet)
        else:
            logger.warning("⚠️  No IP network given, relying on the current neighbor table")

        def lookup(attempt: int) -> Optional[str]:
            logger.info(f"🔍 Looking for VM IP address (attempt {attempt} of {self.attempts})")
            mac = self.read_mac(vmid)
            ip = match_neighbor(mac, self.network.neighbors())
            if ip:
                logger.info(f"✅ Found {ip} for {mac}")
            return ip

        ip = poll_until(lookup, self.attempts, self.delay, sleep=self.sleep)
        if ip is None:
            logger.warning(f"❌ Failed to find IP address for VM {vmid}")
        return ip
