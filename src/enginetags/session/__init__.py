"""Session lifecycle handling."""

from enginetags.session.supervisor import ConnectionSupervisor

__all__ = ["ConnectionSupervisor"]
