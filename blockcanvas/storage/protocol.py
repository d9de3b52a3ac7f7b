"""
PageStorage Protocol Definition.

The editor hands pages to storage as plain JSON-serializable dicts:
{"id": str, "title": str, "blocks": [...]}. Any backend that implements
these methods can be plugged into the editor page.
"""

from typing import Protocol, Dict, Any, List, runtime_checkable


@runtime_checkable
class PageStorage(Protocol):
    """Abstract protocol for page storage backends."""

    @property
    def backend_type(self) -> str:
        """Return the backend type identifier (e.g. 'file')."""
        ...

    def list_pages(self) -> List[Dict[str, Any]]:
        """
        List stored pages.

        Returns:
            List of {'id', 'title'} dicts, sorted by title
        """
        ...

    def load_page(self, page_id: str) -> Dict[str, Any]:
        """
        Load a page. Unknown or unreadable pages come back empty:
        {'id': page_id, 'title': '', 'blocks': []}
        """
        ...

    def save_page(self, page_id: str, page: Dict[str, Any]) -> None:
        ...

    def delete_page(self, page_id: str) -> None:
        ...
