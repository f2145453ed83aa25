"""kindctl - local multi-node Kubernetes clusters on Multipass VMs."""

__version__ = "0.1.0"
