"""
Unit Tests Package for SlotKeeper

Covers the domain layer and the codecs in isolation:
1. Value objects and the slot entity
2. Slot registry allocation rules
3. Fee calculation
4. Tariff table and text codec
5. Snapshot codec
6. Settings loading
"""
