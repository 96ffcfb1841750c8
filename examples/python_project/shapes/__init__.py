"""Example shapes package with registered classes."""
