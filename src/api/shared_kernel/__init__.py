"""Shared Kernel module.

Holds the small set of primitives that both the provisioning and tenancy
bounded contexts depend on (currently the observability context). Changes
here affect every context and should be coordinated.
"""
