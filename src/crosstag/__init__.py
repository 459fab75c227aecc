"""
crosstag - label Crossplane managed resources with the workloads that use them.
"""

__version__ = "0.1.0"
