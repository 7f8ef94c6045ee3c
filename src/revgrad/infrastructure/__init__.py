"""
NumPy-backed implementations of the revgrad domain contracts.
"""
