"""
filevault

Ephemeral file vault: password-protected uploads that expire on their own.
"""

__version__ = "1.0.0"
