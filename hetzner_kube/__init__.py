"""Node provisioning for Kubernetes clusters on Hetzner Cloud."""

__version__ = "0.1.0"
