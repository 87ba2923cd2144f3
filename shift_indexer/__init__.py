"""
Projection of Shift governance chain events into a relational read model.
"""

__version__ = "0.1.0"
