"""Feature-based, stateless CLI package.

- core/: Shared utilities (types, console)
- publish/: Batch publishing and resource listing

Usage:
    python -m socials_publisher.cli --help
    python -m socials_publisher.cli publish batch.yaml
    python -m socials_publisher.cli resources
"""

from .app import app, main

__all__ = ["app", "main"]
