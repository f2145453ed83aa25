"""Configuration management for the kindctl application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


class Config:
    """Application configuration with sensible defaults."""

    # Cluster defaults
    CLUSTER_NAME: str = os.getenv("KINDCTL_CLUSTER_NAME", "kind")
    NODE_IMAGE: str = os.getenv("KINDCTL_NODE_IMAGE", "24.04")

    # Multipass node sizing
    MULTIPASS_BIN: str = os.getenv("KINDCTL_MULTIPASS_BIN", "multipass")
    NODE_CPUS: str = os.getenv("KINDCTL_NODE_CPUS", "2")
    NODE_MEMORY: str = os.getenv("KINDCTL_NODE_MEMORY", "4G")
    NODE_DISK: str = os.getenv("KINDCTL_NODE_DISK", "20G")
    CLOUD_INIT: str = os.getenv("KINDCTL_CLOUD_INIT", "")
    LAUNCH_TIMEOUT: str = os.getenv("KINDCTL_LAUNCH_TIMEOUT", "900")

    # Packages installed by the default cloud-init
    KUBERNETES_VERSION: str = os.getenv("KINDCTL_KUBERNETES_VERSION", "v1.30")
    CNI_MANIFEST_URL: str = os.getenv(
        "KINDCTL_CNI_MANIFEST_URL",
        "https://github.com/flannel-io/flannel/releases/latest/download/kube-flannel.yml"
    )

    # Logging
    LOG_LEVEL: str = os.getenv("KINDCTL_LOG_LEVEL", "INFO").upper()
    LOG_FORMAT: str = os.getenv(
        "KINDCTL_LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
