"""Provision and bootstrap GitHub Enterprise Server appliances on Proxmox VE."""

__version__ = "0.1.0"
