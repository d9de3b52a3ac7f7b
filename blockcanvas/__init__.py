"""
blockcanvas - nested content-block editor core.

Subpackages:
- tree: pure block tree operations, column layout adapter, block type registry
- dnd: pointer-driven drag coordinator and NiceGUI wiring
- storage: page persistence collaborators
"""

__version__ = "0.3.0"
