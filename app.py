"""
Main NiceGUI application for blockcanvas.

Renders a page as a nested block canvas, a block library sidebar and a small
settings panel. Drag and drop goes through blockcanvas.dnd; every edit is a
pure tree operation whose result is pushed onto the undo history and saved
after a short debounce.
"""

import logging
import sys

from nicegui import ui

from dotenv import load_dotenv
load_dotenv()

from blockcanvas.config import configure_logging, get_autosave_delay, get_history_limit
from blockcanvas.paths import ensure_db_dir, get_block_types_dir

configure_logging()
ensure_db_dir()

from blockcanvas.dnd.constants import CANVAS_ID, DRAGGABLE_ATTR, DROPPABLE_ATTR, HORIZONTAL, HOVER_THROTTLE, LIBRARY_ID, ORIENTATION_ATTR
from blockcanvas.dnd.coordinator import DragCoordinator
from blockcanvas.dnd.handlers import POINTER_KEYS, setup_drag_handlers
from blockcanvas.dnd.overlay import DropIndicatorOverlay
from blockcanvas.storage import create_page_store
from blockcanvas.tree import (
    BlockTypeRegistry,
    EditHistory,
    delete_block_deep,
    duplicate_block_deep,
    find_block,
    is_column_container,
    make_slot_id,
    normalize_tree_columns,
    place_beside,
    slot_children,
    update_block_deep,
    validate_tree,
)
from blockcanvas.tree.columns import add_column, get_column_layout, remove_column
from blockcanvas.tree.mutator import replace_block

logger = logging.getLogger(__name__)

DEFAULT_PAGE_ID = 'home'

registry = BlockTypeRegistry(get_block_types_dir())
store = create_page_store()

ui.add_head_html('''
    <style>
        .bc-card { cursor: grab; }
        .bc-card.bc-selected { outline: 2px solid #3b82f6; }
        .bc-drop { min-height: 48px; border: 1px dashed #475569; border-radius: 6px; }
        .bc-slot { flex: 1 1 0; }
    </style>
''', shared=True)


def block_summary(block) -> str:
    """Short text shown on a block card."""
    definition = registry.get_definition(block.get('type'))
    label = definition['label'] if definition else block.get('type', '?')
    content = block.get('content') or {}
    if content.get('kind') == 'text' and content.get('value'):
        text = str(content['value'])
        return f"{label}: {text[:60]}{'…' if len(text) > 60 else ''}"
    return label


@ui.page('/')
def main_page(page: str = DEFAULT_PAGE_ID):
    ui.dark_mode().enable()

    loaded = store.load_page(page)
    state = {
        'page_id': page,
        'title': loaded.get('title') or page,
        'selected_id': None,
    }
    history = EditHistory(loaded['blocks'], limit=get_history_limit())

    coordinator = DragCoordinator()
    coordinator.set_drop_disabled(LIBRARY_ID)
    overlay = DropIndicatorOverlay()
    overlay.setup()

    # --- Saving ---
    _save_timer = None

    def execute_save():
        report = validate_tree(history.current)
        for message in report['errors']:
            logger.warning(f"Page {state['page_id']}: {message}")
        try:
            store.save_page(state['page_id'], {'title': state['title'], 'blocks': history.current})
        except OSError as e:
            logger.exception(f"Saving page {state['page_id']} failed")
            ui.notify(f'Save failed: {e}', type='negative', position='bottom-right')
            return
        save_status.text = 'Saved.'
        ui.timer(2.0, lambda: setattr(save_status, 'text', ''), once=True)

    def schedule_save():
        nonlocal _save_timer
        save_status.text = 'Unsaved changes...'
        if _save_timer:
            _save_timer.cancel()
        _save_timer = ui.timer(get_autosave_delay(), execute_save, once=True)

    def commit(tree, selected_id=None):
        """Record a new tree value and re-render."""
        if tree is history.current:
            return
        history.push(tree)
        if selected_id is not None:
            state['selected_id'] = selected_id
        refresh_all()
        schedule_save()

    def refresh_all():
        render_canvas.refresh()
        render_settings.refresh()
        undo_button.set_enabled(history.can_undo)
        redo_button.set_enabled(history.can_redo)

    handlers = setup_drag_handlers(
        state, coordinator, overlay, registry, history,
        refresh_canvas=refresh_all,
        schedule_save=schedule_save,
    )

    # --- Block actions ---
    def select_block(block_id):
        state['selected_id'] = block_id
        render_canvas.refresh()
        render_settings.refresh()

    def duplicate(block_id):
        result = duplicate_block_deep(history.current, block_id)
        if not result.found:
            ui.notify('Block not found', type='warning')
            return
        tree = place_beside(result.tree, block_id, result.duplicated_id)
        commit(normalize_tree_columns(tree), selected_id=result.duplicated_id)

    def delete(block_id):
        result = delete_block_deep(history.current, block_id)
        if not result.found:
            ui.notify('Block not found', type='warning')
            return
        if state['selected_id'] == block_id:
            state['selected_id'] = None
        commit(normalize_tree_columns(result.tree))

    def undo():
        if history.undo() is not None:
            refresh_all()
            schedule_save()

    def redo():
        if history.redo() is not None:
            refresh_all()
            schedule_save()

    def handle_keyboard(e):
        handlers['handle_keyboard'](e)
        if not e.action.keydown or not e.modifiers.ctrl:
            return
        if e.key == 'z' and not e.modifiers.shift:
            undo()
        elif e.key in ('y', 'Z', 'z'):
            redo()

    ui.keyboard(on_key=handle_keyboard)

    # --- Canvas rendering ---
    def bind_container(element, container_id, orientation=None):
        attrs = f'{DROPPABLE_ATTR}="{container_id}"'
        if orientation:
            attrs += f' {ORIENTATION_ATTR}="{orientation}"'
        element.props(attrs)
        element.on('dragleave', lambda e, cid=container_id: handlers['handle_drag_leave'](cid))

    def render_block(block, index, container_id):
        block_id = block['id']
        selected = state['selected_id'] == block_id
        with ui.card().classes('bc-card w-full p-2 gap-1' + (' bc-selected' if selected else '')) as card:
            card.props(f'draggable {DRAGGABLE_ATTR}="{block_id}"')
            card.on('dragstart.stop',
                    lambda e, bid=block_id, i=index, cid=container_id: handlers['handle_drag_start'](bid, i, cid))
            card.on('dragend.stop', handlers['handle_drag_end'], POINTER_KEYS)
            card.on('click.stop', lambda e, bid=block_id: select_block(bid))

            with ui.row().classes('w-full items-center no-wrap'):
                ui.label(block_summary(block)).classes('text-sm grow')
                ui.button(icon='content_copy', on_click=lambda bid=block_id: duplicate(bid)).props('flat dense round size=sm').tooltip('Duplicate')
                ui.button(icon='delete', on_click=lambda bid=block_id: delete(bid)).props('flat dense round size=sm color=negative').tooltip('Delete')

            if is_column_container(block):
                with ui.row().classes('w-full no-wrap gap-2'):
                    for column_index, column in enumerate(get_column_layout(block)):
                        slot_id = make_slot_id(block_id, column_index)
                        with ui.column().classes('bc-drop bc-slot p-1 gap-1').style(f"flex-basis: {column.get('width', 'auto')}") as slot:
                            bind_container(slot, slot_id)
                            for child_index, child in enumerate(slot_children(block, column_index)):
                                render_block(child, child_index, slot_id)
            elif isinstance(block.get('children'), list):
                horizontal = block.get('type') == 'core/buttons'
                layout = ui.row if horizontal else ui.column
                with layout().classes('bc-drop w-full p-1 gap-1') as inner:
                    bind_container(inner, block_id, HORIZONTAL if horizontal else None)
                    for child_index, child in enumerate(block['children']):
                        render_block(child, child_index, block_id)

    @ui.refreshable
    def render_canvas():
        tree = history.current
        if not tree:
            ui.label('Drag blocks here from the library').classes('text-gray-400 p-4')
        for index, block in enumerate(tree):
            render_block(block, index, CANVAS_ID)

    # --- Settings panel ---
    @ui.refreshable
    def render_settings():
        block_id = state['selected_id']
        block = find_block(history.current, block_id) if block_id else None
        if block is None:
            ui.label('Select a block to edit it').classes('text-gray-400 text-sm')
            return

        ui.label(block_summary(block)).classes('text-lg font-bold')
        ui.label(block.get('type', '')).classes('text-xs text-gray-400')

        content = block.get('content') or {}
        if content.get('kind') == 'text':
            text_input = ui.textarea('Text', value=content.get('value', '')).classes('w-full')

            def save_text(e=None, bid=block_id):
                result = update_block_deep(history.current, bid, {'content': {'value': text_input.value}})
                if result.found:
                    commit(result.tree)

            text_input.on('blur', save_text)

        styles = block.get('styles') or {}
        padding_input = ui.input('Padding', value=styles.get('padding', '')).classes('w-full')

        def save_padding(e=None, bid=block_id):
            result = update_block_deep(history.current, bid, {'styles': {'padding': padding_input.value}})
            if result.found:
                commit(result.tree)

        padding_input.on('blur', save_padding)

        if is_column_container(block):
            ui.label(f"{len(get_column_layout(block))} columns").classes('text-sm')
            with ui.row():
                ui.button('Add column', on_click=lambda bid=block_id: commit(
                    replace_block(history.current, bid, add_column))).props('dense outline')

                def drop_last_column(bid=block_id):
                    current = find_block(history.current, bid)
                    count = len(get_column_layout(current)) if current else 0
                    if count <= 1:
                        ui.notify('A columns block needs at least one column', type='warning')
                        return
                    commit(replace_block(history.current, bid, lambda b: remove_column(b, count - 1)))

                ui.button('Remove column', on_click=drop_last_column).props('dense outline color=negative')

    # --- Layout ---
    with ui.header().classes('items-center gap-2 bg-slate-900'):
        ui.label('blockcanvas').classes('text-lg font-bold')
        ui.label(state['title']).classes('text-gray-400')
        undo_button = ui.button(icon='undo', on_click=undo).props('flat dense color=white').tooltip('Undo (Ctrl+Z)')
        redo_button = ui.button(icon='redo', on_click=redo).props('flat dense color=white').tooltip('Redo (Ctrl+Shift+Z)')
        undo_button.set_enabled(history.can_undo)
        redo_button.set_enabled(history.can_redo)
        ui.space()
        save_status = ui.label('').classes('text-xs text-gray-400')

    with ui.row().classes('w-full no-wrap items-start gap-4'):
        with ui.column().classes('w-64 gap-1') as library:
            library.props(f'{DROPPABLE_ATTR}="{LIBRARY_ID}"')
            ui.label('Blocks').classes('text-sm font-bold')
            library_index = 0
            for category, definitions in registry.list_by_category().items():
                ui.label(category.title()).classes('text-xs text-gray-400 mt-2')
                for definition in definitions:
                    with ui.card().classes('bc-card w-full p-2') as item:
                        item.props(f'draggable {DRAGGABLE_ATTR}="{definition["name"]}"')
                        item.on('dragstart.stop', lambda e, name=definition['name'], i=library_index:
                                handlers['handle_drag_start'](name, i, LIBRARY_ID))
                        item.on('dragend.stop', handlers['handle_drag_end'], POINTER_KEYS)
                        ui.label(definition['label']).classes('text-sm')
                    library_index += 1

        with ui.column().classes('bc-drop grow p-2 gap-2') as canvas:
            canvas.props(f'{DROPPABLE_ATTR}="{CANVAS_ID}"')
            canvas.on('dragover.prevent', handlers['handle_drag_over'], POINTER_KEYS, throttle=HOVER_THROTTLE)
            canvas.on('drop.prevent', handlers['handle_drop'], POINTER_KEYS)
            canvas.on('dragleave', lambda e: handlers['handle_drag_leave'](CANVAS_ID))
            render_canvas()

        with ui.card().classes('w-80 gap-2'):
            render_settings()


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(
        title='blockcanvas',
        port=8082,
        reload=not getattr(sys, 'frozen', False),
    )
