"""
Local host services for gimport.

This package provides:
- Abstract service interfaces the import command is written against
- A local implementation backed by Gradle and the JDK's javac
- Project state, JDK table and settings persistence
- The low-memory watchdog
"""

from gimport.host.services import HostServices, create_host_services

__all__ = [
    "HostServices",
    "create_host_services",
]
