"""Marketplace gateway service."""
