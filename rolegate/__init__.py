"""Role-based access control: role graphs, policy models, file adapters and watchers."""

__version__ = "0.1.0"

__all__ = ["role_manager", "assertion", "model", "adapter", "file_adapter", "watcher"]