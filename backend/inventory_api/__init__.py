"""Inventory management REST API."""
