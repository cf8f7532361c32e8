"""
subc Command-Line Interface
===========================

- **cparse**: parse a C subset source file and dump tokens or the tree

The tool is a Click-based CLI application.
"""

__all__ = ["cparse"]
