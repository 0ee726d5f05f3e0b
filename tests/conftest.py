"""Shared test fixtures for gheboot tests."""

from pathlib import Path
from typing import List

import pytest

from gheboot.config import BootOptions
from gheboot.models import VMDefinition

from fakes import VM_MAC, FakeProxmoxCLI


@pytest.fixture
def fake_client() -> FakeProxmoxCLI:
    return FakeProxmoxCLI()


@pytest.fixture
def sleeps() -> List[float]:
    """Collects requested sleep durations instead of sleeping."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append


@pytest.fixture
def license_file(tmp_path) -> Path:
    path = tmp_path / "ghes.ghl"
    path.write_bytes(b"LICENSE-DATA")
    return path


@pytest.fixture
def image_dir(tmp_path) -> Path:
    directory = tmp_path / "images"
    directory.mkdir()
    (directory / "github-enterprise-3.15.4.qcow2").write_bytes(b"qcow2")
    return directory


@pytest.fixture
def sample_vm(image_dir) -> VMDefinition:
    return VMDefinition(
        vmid=101,
        version="3.15.4",
        hostname="ghes-primary",
        boot_storage="local",
        ssd_storage="local-ssd",
        image_path=image_dir / "github-enterprise-3.15.4.qcow2",
        poweron=True,
    )


@pytest.fixture
def boot_options(image_dir, license_file) -> BootOptions:
    return BootOptions(
        version="3.15.4",
        hostname="ghes-primary",
        boot_storage="local",
        ssd_storage="local-ssd",
        poweron=True,
        root_password="s3cret",
        license_file=license_file,
        ip_netmask="10.0.0.0/30",
        image_dir=image_dir,
    )


@pytest.fixture
def neighbor_table() -> List[str]:
    """Sample ``ip neigh show`` output with the VM present."""
    return [
        "192.168.1.1 dev vmbr0 lladdr 00:11:22:33:44:55 REACHABLE",
        f"fe80::be24:11ff:fe5e:7a01 dev vmbr0 lladdr {VM_MAC.lower()} STALE",
        f"192.168.1.57 dev vmbr0 lladdr {VM_MAC.lower()} REACHABLE",
        "192.168.1.99 dev vmbr0  FAILED",
    ]
