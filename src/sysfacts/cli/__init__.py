"""sysfacts CLI module.

This module provides the command-line interface for sysfacts, enabling users to:
    - Collect facts with `facts collect`
    - Re-collect a subtree with `facts refresh`
    - Inspect loaded plugins with `facts plugins`
"""
