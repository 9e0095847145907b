"""
App Datasets - TrueNAS SCALE app dataset provisioner.

Creates a parent dataset plus optional children under the Apps preset and
applies a standard NFSv4 ACL and apps:apps ownership to each of them.
"""

__version__ = "1.0.0"
