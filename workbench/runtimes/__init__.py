"""Runtime implementations for sandboxed scripts.

Each subpackage contains a complete sandbox implementation that extends
BaseSandbox.
"""
