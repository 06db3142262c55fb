"""kubeherald: Kubernetes event enrichment and chat-ops command gateway."""

__version__ = "0.3.0"
