"""
Page storage for blockcanvas.

- PageStorage: protocol every backend implements
- FilePageStore: one JSON document per page on local disk
"""

from blockcanvas.storage.protocol import PageStorage
from blockcanvas.storage.file_backend import FilePageStore, create_page_store, empty_page

__all__ = [
    'PageStorage',
    'FilePageStore',
    'create_page_store',
    'empty_page',
]
