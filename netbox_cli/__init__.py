"""
Netbox command-line client.

This package provides:
- Netbox REST API client (GET/PATCH/POST/DELETE, token auth)
- Registry of the DCIM, circuits and core endpoints exposed as commands
- Interactive pager over `next` cursors
- Colourised console rendering of API objects
"""

__version__ = "0.2.0"
