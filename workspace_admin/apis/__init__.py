"""Clients for the Directory and Licensing services."""
