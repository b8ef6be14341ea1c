"""package-checker core package.

This package checks npm-style projects for known-vulnerable package versions
against operator-supplied vulnerability sources. The scanning logic is
callable from the command line and from other Python code.
"""

__all__ = [
    "core",
]
