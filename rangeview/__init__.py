"""
Top-level package for rangeview: lazy range algebra and view composition
over row/column oriented tables.

Most code should import from submodules such as:
    rangeview.core
    rangeview.providers
    rangeview.services
    rangeview.vis
"""

__all__: list[str] = []
