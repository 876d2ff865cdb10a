"""Maintenance scripts for the 10xR community service."""
