#!/usr/bin/env python3
"""
GitHub Enterprise Server Boot - create and boot a GHES appliance in Proxmox.

    gheboot -v 3.15.4 -h ghes-primary -b local -s local-ssd -c 8 -m 65535 -n vmbr0 -p -d

Downloads the QCOW2 image for the given version, imports it into the boot
storage, creates a data drive on the SSD storage and boots the VM. With
--root, --license and --ipnetmask it also finds the VM's IP address and runs
the initial configuration.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from gheboot.config import BootOptions, Config
from gheboot.errors import GhebootError, InvalidSubnetError
from gheboot.models import BootResult
from gheboot.orchestrator import Orchestrator
from gheboot.subnet import SubnetDescriptor

app = typer.Typer(
    name="gheboot",
    help="Create and boot a new GitHub Enterprise Server appliance in Proxmox.",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)


def validate_cidr(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        SubnetDescriptor.parse(value)
    except InvalidSubnetError as e:
        raise typer.BadParameter(str(e))
    return value


def print_result(result: BootResult) -> None:
    table = Table(title="GHES Appliance")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("VM ID", str(result.vmid))
    table.add_row("Hostname", result.hostname)
    if result.initial_config_requested:
        table.add_row("IP Address", result.ip or "not found")
    console.print(table)

    if not result.initial_config_requested:
        return
    if result.ip is None:
        console.print("❌ Failed to find VM IP address, skipping initial configuration")
    elif result.configured:
        console.print(
            "✅ Initial configuration completed. You can finish setting up your GHES instance at "
            f"{result.configuration.setup_url}"  # type: ignore[union-attr]
        )
    else:
        console.print("❌ Initial configuration failed, the appliance never became ready")


@app.command()
def main(
    version: str = typer.Option(..., "--version", "-v", help="Version of GHES to install"),
    hostname: str = typer.Option(..., "--hostname", "-h", help="Hostname for new virtual machine"),
    boot_storage: str = typer.Option(..., "--bootstorage", "-b", help="Name of boot disk storage"),
    ssd_storage: str = typer.Option(..., "--ssdstorage", "-s", help="Name of SSD storage"),
    cores: int = typer.Option(8, "--cores", "-c", min=1, help="Number of vCPU cores"),
    memory: int = typer.Option(65535, "--memory", "-m", min=1, help="Amount of RAM in megabytes"),
    network: str = typer.Option("vmbr0", "--network", "-n", help="Network device name"),
    cpu_type: str = typer.Option("host", "--cputype", help="Proxmox CPU type"),
    data_disk_size: str = typer.Option(Config.DATA_DISK_SIZE, "--disksize", help="Size of the data disk"),
    root_password: Optional[str] = typer.Option(
        None, "--root", "-r", help="Root site password for initial configuration"
    ),
    license_file: Optional[Path] = typer.Option(
        None, "--license", "-l", exists=True, dir_okay=False, readable=True, help="Path to license file"
    ),
    ip_netmask: Optional[str] = typer.Option(
        None,
        "--ipnetmask",
        "-i",
        callback=validate_cidr,
        help="IP network the VM will be on, in CIDR format (e.g. 192.168.1.0/24)",
    ),
    poweron: bool = typer.Option(False, "--poweron", "-p", help="Power on VM after creation"),
    onboot: bool = typer.Option(False, "--onboot", "-o", help="Boot VM when the hypervisor reboots"),
    download: bool = typer.Option(False, "--download", "-d", help="Download QCOW2 image for the version"),
    insecure: bool = typer.Option(False, "--insecure", "-k", help="Allow insecure HTTPS for initial configuration"),
    image_dir: Path = typer.Option(Path("."), "--image-dir", file_okay=False, help="Directory holding disk images"),
    node: Optional[str] = typer.Option(None, "--node", help="Proxmox node name (defaults to local hostname)"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Create and boot a new GitHub Enterprise Server appliance in Proxmox."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
    )

    options = BootOptions(
        version=version,
        hostname=hostname,
        boot_storage=boot_storage,
        ssd_storage=ssd_storage,
        cores=cores,
        memory=memory,
        network=network,
        cpu_type=cpu_type,
        data_disk_size=data_disk_size,
        onboot=onboot,
        poweron=poweron,
        download=download,
        root_password=root_password,
        license_file=license_file,
        ip_netmask=ip_netmask,
        insecure=insecure,
        image_dir=image_dir,
        node=node,
    )
    if bool(root_password) != (license_file is not None):
        console.print("⚠️  Both --root and --license are needed for initial configuration, skipping it")

    try:
        result = Orchestrator.from_options(options).run()
    except GhebootError as e:
        console.print(f"ERROR: {e}")
        raise typer.Exit(1)

    print_result(result)


if __name__ == "__main__":
    app()
