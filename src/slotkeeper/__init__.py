# File: src/slotkeeper/__init__.py
"""
SlotKeeper - single-site parking occupancy and billing tracker

Layers:
- domain: slots, tariffs, fee rules
- infrastructure: snapshot codec, file repositories, settings
- application: parking service, DTOs, menu commands
- presentation: console menu
"""

__version__ = "1.0.0"
