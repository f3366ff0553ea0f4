"""Versioned assessment content shipped as package data."""
