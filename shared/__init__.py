"""
Shared Kernel

Base classes, value objects, the error taxonomy, the unit of work and
the message bus shared by all domain apps.
"""
