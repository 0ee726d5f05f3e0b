"""Host-side network helpers: reachability probes and the neighbor (ARP) table."""

import logging
from typing import List

from gheboot.errors import CommandFailedError
from gheboot.proxmox_cli import Runner, run_command

logger = logging.getLogger(__name__)


class HostNetwork:
    """Wraps ping and ip neigh on the hypervisor host."""

    def __init__(self, runner: Runner = run_command):
        self.runner = runner

    def ping(self, ip: str, timeout: float = 0.2) -> bool:
        """
        Send a single best-effort ICMP echo to ``ip``.

        Only used to populate the neighbor cache, so an unreachable host or a
        timeout is reported as False rather than raised.
        """
        try:
            self.runner(["ping", "-c1", "-i", "0.2", ip], timeout=timeout)
            return True
        except CommandFailedError:
            return False

    def neighbors(self) -> List[str]:
        """Return the raw lines of ``ip neigh show``."""
        output = self.runner(["ip", "neigh", "show"])
        return [line for line in output.splitlines() if line.strip()]
