"""relkit: changelog and tag automation for git release branches."""

__version__ = "0.1.0"
