"""
marina_core - data-source mediation and connectivity monitoring for the
marina back office.
"""

__version__ = "0.1.0"
