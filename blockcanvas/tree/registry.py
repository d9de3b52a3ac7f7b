"""
Block Type Registry for blockcanvas.

Handles loading, validation, and caching of block type definitions.
Built-in `core/*` types are always available; additional types are defined by
YAML files in block_types/ (one type per file):

    name: acme/hero
    label: Hero
    category: layout
    is_container: false
    default_content: {title: "Welcome"}
    default_styles: {padding: "40px"}
    default_settings: {}

The registry is a plain value: pass it to every insert call site instead of
reaching for a module-level instance.
"""

import copy
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

COLUMNS_TYPE = "core/columns"

VALID_CATEGORIES = frozenset(['basic', 'media', 'layout', 'advanced'])

# Applied to every default block before the type's own default_styles
BASE_STYLES = {
    'padding': '20px',
    'margin': '0px',
    'contentAlignHorizontal': 'left',
    'contentAlignVertical': 'top',
}


class BlockTypeError(Exception):
    """Raised when a type definition cannot produce a valid block."""


def _text(value: str = '', **extra) -> Dict[str, Any]:
    return {'kind': 'text', 'value': value, **extra}


def _structured(**data) -> Dict[str, Any]:
    return {'kind': 'structured', 'data': data}


BUILTIN_TYPES: Dict[str, Dict[str, Any]] = {
    'core/heading': {'label': 'Heading', 'category': 'basic', 'default_content': _text('Heading', level=2)},
    'core/paragraph': {'label': 'Paragraph', 'category': 'basic', 'default_content': _text('')},
    'core/button': {'label': 'Button', 'category': 'basic', 'default_content': _text('Button', href='#')},
    'core/buttons': {'label': 'Buttons', 'category': 'layout', 'is_container': True,
                     'default_content': _structured(layout='row')},
    'core/list': {'label': 'List', 'category': 'basic', 'default_content': _structured(ordered=False, items=[])},
    'core/quote': {'label': 'Quote', 'category': 'basic', 'default_content': _text('', citation='')},
    'core/pullquote': {'label': 'Pullquote', 'category': 'basic', 'default_content': _text('', citation='')},
    'core/preformatted': {'label': 'Preformatted', 'category': 'advanced', 'default_content': _text('')},
    'core/code': {'label': 'Code', 'category': 'advanced', 'default_content': _text('', language='plain')},
    'core/html': {'label': 'Custom HTML', 'category': 'advanced', 'default_content': _text('')},
    'core/table': {'label': 'Table', 'category': 'advanced', 'default_content': _structured(rows=[], hasHeader=True)},
    'core/image': {'label': 'Image', 'category': 'media', 'default_content': _structured(url='', alt='')},
    'core/gallery': {'label': 'Gallery', 'category': 'media', 'default_content': _structured(images=[], columns=3)},
    'core/video': {'label': 'Video', 'category': 'media', 'default_content': _structured(url='', autoplay=False)},
    'core/audio': {'label': 'Audio', 'category': 'media', 'default_content': _structured(url='')},
    'core/file': {'label': 'File', 'category': 'media', 'default_content': _structured(url='', fileName='')},
    'core/media-text': {'label': 'Media & Text', 'category': 'media',
                        'default_content': _structured(mediaUrl='', mediaPosition='left')},
    'core/cover': {'label': 'Cover', 'category': 'media', 'is_container': True,
                   'default_content': _structured(url='', overlayOpacity=50)},
    'core/spacer': {'label': 'Spacer', 'category': 'layout', 'default_content': _structured(height='40px')},
    'core/separator': {'label': 'Separator', 'category': 'layout', 'default_content': _structured(style='default')},
    'core/group': {'label': 'Group', 'category': 'layout', 'is_container': True,
                   'default_content': _structured(tagName='div')},
    COLUMNS_TYPE: {
        'label': 'Columns',
        'category': 'layout',
        'is_container': True,
        'default_content': _structured(gap='20px', verticalAlignment='top',
                                       horizontalAlignment='left', direction='row'),
        'default_settings': {
            'column_layout': [
                {'column_id': 'col-1', 'width': '50%', 'block_ids': []},
                {'column_id': 'col-2', 'width': '50%', 'block_ids': []},
            ],
        },
    },
}


class BlockTypeRegistry:
    """
    Manages block type definitions.

    Responsibilities:
    - Serve built-in core/* definitions
    - Load custom definitions from block_types/*.yaml
    - Validate definitions against schema rules
    - Cache loaded types
    - Build default block instances for insertion
    """

    def __init__(self, block_types_dir: Optional[Path] = None, include_builtins: bool = True):
        self.block_types_dir = Path(block_types_dir) if block_types_dir else None
        self._types: Dict[str, Dict[str, Any]] = {}
        self._errors: Dict[str, List[str]] = {}
        self._loaded = False
        self._include_builtins = include_builtins
        self._register_builtins()

    def _register_builtins(self):
        if self._include_builtins:
            for name, definition in BUILTIN_TYPES.items():
                self._types[name] = self._normalize(name, definition)

    def _normalize(self, name: str, definition: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'name': name,
            'label': definition.get('label') or name.split('/')[-1].replace('-', ' ').title(),
            'category': definition.get('category', 'basic'),
            'is_container': bool(definition.get('is_container', False)),
            'default_content': definition.get('default_content') or {},
            'default_styles': definition.get('default_styles') or {},
            'default_settings': definition.get('default_settings') or {},
        }

    def validate_definition(self, definition: Any, source: str = '<memory>') -> List[str]:
        """Validate a type definition. Returns list of error messages."""
        if not isinstance(definition, dict):
            return [f"{source}: definition must be a mapping"]

        errors = []
        name = definition.get('name')
        if not name:
            errors.append(f"{source}: missing required 'name'")
        elif not isinstance(name, str) or not re.match(r'^[a-z][a-z0-9-]*/[a-z][a-z0-9-]*$', name):
            errors.append(f"{source}: name must look like 'namespace/type' (lowercase, a-z, 0-9, -)")

        category = definition.get('category', 'basic')
        if category not in VALID_CATEGORIES:
            errors.append(f"{source}: invalid category '{category}' (must be: {', '.join(sorted(VALID_CATEGORIES))})")

        for key in ('default_content', 'default_styles', 'default_settings'):
            if key in definition and definition[key] is not None and not isinstance(definition[key], dict):
                errors.append(f"{source}: '{key}' must be a mapping")

        if 'is_container' in definition and not isinstance(definition['is_container'], bool):
            errors.append(f"{source}: 'is_container' must be a boolean")

        return errors

    def register(self, definition: Dict[str, Any]) -> List[str]:
        """Register a definition. Returns validation errors; nothing is registered if any."""
        errors = self.validate_definition(definition)
        if errors:
            return errors
        name = definition['name']
        self._types[name] = self._normalize(name, definition)
        return []

    def load_directory(self) -> int:
        """
        Load every *.yaml / *.yml file in block_types_dir.
        Returns the number of types registered. Invalid files are skipped and
        their errors kept for validation_errors().
        """
        self._loaded = True
        if not self.block_types_dir or not self.block_types_dir.is_dir():
            return 0

        count = 0
        files = sorted(list(self.block_types_dir.glob("*.yaml")) + list(self.block_types_dir.glob("*.yml")))
        for path in files:
            try:
                with open(path, 'r', encoding='utf-8') as f:
                    definition = yaml.safe_load(f)
            except (yaml.YAMLError, OSError) as e:
                logger.warning(f"Failed to load block type file {path}: {e}")
                self._errors[path.name] = [f"{path.name}: {e}"]
                continue

            errors = self.validate_definition(definition, path.name)
            if errors:
                logger.warning(f"Invalid block type definition {path}: {errors}")
                self._errors[path.name] = errors
                continue

            name = definition['name']
            self._types[name] = self._normalize(name, definition)
            count += 1
        return count

    def _ensure_loaded(self):
        if not self._loaded:
            self.load_directory()

    def validation_errors(self) -> Dict[str, List[str]]:
        self._ensure_loaded()
        return dict(self._errors)

    def list_types(self) -> List[str]:
        """Return sorted list of available type names."""
        self._ensure_loaded()
        return sorted(self._types)

    def list_by_category(self) -> Dict[str, List[Dict[str, Any]]]:
        """Group definitions by category for the block library sidebar."""
        self._ensure_loaded()
        grouped: Dict[str, List[Dict[str, Any]]] = {}
        for name in sorted(self._types):
            definition = self._types[name]
            grouped.setdefault(definition['category'], []).append(definition)
        return grouped

    def get_definition(self, block_type: str) -> Optional[Dict[str, Any]]:
        self._ensure_loaded()
        return self._types.get(block_type)

    def is_container_type(self, block_type: str) -> bool:
        definition = self.get_definition(block_type)
        return bool(definition and definition['is_container'])

    def get_default_block(self, block_type: str, block_id: str) -> Optional[Dict[str, Any]]:
        """
        Build a default block of the given type with the given id.
        Returns None for unknown types.
        """
        definition = self.get_definition(block_type)
        if definition is None:
            return None

        if not isinstance(block_id, str) or not block_id:
            raise BlockTypeError(f"Block id for {block_type} must be a non-empty string, got {block_id!r}")

        block = {
            'id': block_id,
            'kind': 'container' if definition['is_container'] else 'block',
            'type': block_type,
            'parent_id': None,
            'content': copy.deepcopy(definition['default_content']),
            'styles': {**BASE_STYLES, **copy.deepcopy(definition['default_styles'])},
            'settings': copy.deepcopy(definition['default_settings']),
        }
        if definition['is_container']:
            block['children'] = []
        return block

    def clear_cache(self):
        """Forget custom definitions so the next lookup reloads block_types_dir."""
        self._types = {}
        self._register_builtins()
        self._errors.clear()
        self._loaded = False
