"""
Command line interface for crosstag.
"""
