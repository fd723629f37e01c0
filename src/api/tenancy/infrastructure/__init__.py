"""Tenancy infrastructure: branching API client and branch execution."""
