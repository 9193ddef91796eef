"""
Integration Tests Package for SlotKeeper

These tests verify that the layers work together:
1. Parking service over the domain and in-memory repositories
2. File persistence and restarts
3. Command processing and error containment
4. Console menu sessions
5. The application entry point
"""
