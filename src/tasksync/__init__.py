"""
ClickUp <-> Motion incremental task sync.
"""

__version__ = "1.0.0"
