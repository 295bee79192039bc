"""
Account configuration module.

Frozen defaults, YAML loading with layered precedence, and validation.
"""
