"""
Local file storage for pages.

Structure:
- {pages_dir}/{page_id}.json: one JSON document per page
"""

import json
import logging
import re
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from blockcanvas.config import get_pages_dir_setting
from blockcanvas.tree.columns import normalize_tree_columns
from blockcanvas.tree.mutator import set_parent_ids

logger = logging.getLogger(__name__)

PAGE_ID_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')


def empty_page(page_id: str, title: str = '') -> Dict[str, Any]:
    return {"id": page_id, "title": title, "blocks": []}


class FilePageStore:
    """Page storage backed by a directory of JSON files."""

    def __init__(self, pages_dir: Union[str, Path]):
        self.pages_dir = Path(pages_dir)
        self.pages_dir.mkdir(parents=True, exist_ok=True)

    @property
    def backend_type(self) -> str:
        return "file"

    def _page_path(self, page_id: str) -> Path:
        if not PAGE_ID_PATTERN.match(page_id or ''):
            raise ValueError(f"Invalid page id: {page_id!r}")
        return self.pages_dir / f"{page_id}.json"

    def list_pages(self) -> List[Dict[str, Any]]:
        pages = []
        for page_file in self.pages_dir.glob("*.json"):
            try:
                with open(page_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                pages.append({"id": page_file.stem, "title": data.get("title") or page_file.stem})
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to read page file {page_file}: {e}")
        return sorted(pages, key=lambda p: p["title"].lower())

    def load_page(self, page_id: str) -> Dict[str, Any]:
        """
        Load a page, re-stamping parent ids and repairing column layouts.
        Missing or unreadable files yield an empty page.
        """
        path = self._page_path(page_id)
        if not path.exists():
            return empty_page(page_id)

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load page {page_id}: {e}")
            return empty_page(page_id)

        blocks = data.get("blocks")
        if not isinstance(blocks, list):
            logger.warning(f"Page {page_id} has no block list; starting empty")
            blocks = []

        repaired = normalize_tree_columns(set_parent_ids(blocks))
        if repaired is not blocks:
            logger.info(f"Repaired block structure of page {page_id}")

        return {"id": page_id, "title": data.get("title", ""), "blocks": repaired}

    def save_page(self, page_id: str, page: Dict[str, Any]) -> None:
        path = self._page_path(page_id)
        document = {
            "id": page_id,
            "title": page.get("title", ""),
            "blocks": page.get("blocks", []),
        }
        # Write to a sibling temp file, then swap into place
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(document, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)
        logger.debug(f"Saved page {page_id} ({len(document['blocks'])} root blocks)")

    def delete_page(self, page_id: str) -> None:
        path = self._page_path(page_id)
        if path.exists():
            path.unlink()

    def create_page(self, title: str) -> str:
        page_id = uuid.uuid4().hex
        self.save_page(page_id, empty_page(page_id, title))
        logger.info(f"Created page {page_id} ({title})")
        return page_id


def create_page_store(pages_dir: Optional[Union[str, Path]] = None) -> FilePageStore:
    """Store for pages_dir, or the configured pages directory."""
    return FilePageStore(pages_dir or get_pages_dir_setting())
