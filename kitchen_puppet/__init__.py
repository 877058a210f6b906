"""Puppet apply provisioner for test-kitchen style hosts."""

__version__ = "0.1.0"
