"""
Tests for the block type registry.
"""

import pytest

from blockcanvas.tree.registry import BASE_STYLES, COLUMNS_TYPE, BlockTypeError, BlockTypeRegistry


class TestBuiltins:

    def test_core_types_available(self, registry):
        types = registry.list_types()
        for name in ("core/heading", "core/paragraph", "core/group", COLUMNS_TYPE, "core/image"):
            assert name in types

    def test_default_leaf_block(self, registry):
        block = registry.get_default_block("core/heading", "h1")
        assert block["id"] == "h1"
        assert block["kind"] == "block"
        assert block["parent_id"] is None
        assert block["content"]["value"] == "Heading"
        assert "children" not in block
        for key, value in BASE_STYLES.items():
            assert block["styles"][key] == value

    def test_default_columns_block(self, registry):
        block = registry.get_default_block(COLUMNS_TYPE, "c1")
        assert block["kind"] == "container"
        assert block["children"] == []
        layout = block["settings"]["column_layout"]
        assert [c["width"] for c in layout] == ["50%", "50%"]

    def test_defaults_are_independent_copies(self, registry):
        first = registry.get_default_block(COLUMNS_TYPE, "c1")
        first["settings"]["column_layout"][0]["block_ids"].append("x")
        second = registry.get_default_block(COLUMNS_TYPE, "c2")
        assert second["settings"]["column_layout"][0]["block_ids"] == []

    def test_unknown_type_returns_none(self, registry):
        assert registry.get_default_block("acme/nothing", "id") is None

    def test_bad_id_raises(self, registry):
        with pytest.raises(BlockTypeError):
            registry.get_default_block("core/heading", "")

    def test_is_container_type(self, registry):
        assert registry.is_container_type("core/group")
        assert not registry.is_container_type("core/paragraph")
        assert not registry.is_container_type("acme/nothing")

    def test_list_by_category(self, registry):
        grouped = registry.list_by_category()
        assert "layout" in grouped
        assert any(d["name"] == COLUMNS_TYPE for d in grouped["layout"])


class TestValidation:

    def test_valid_definition(self, registry):
        assert registry.validate_definition({"name": "acme/hero", "category": "layout"}) == []

    def test_missing_name(self, registry):
        errors = registry.validate_definition({"category": "basic"})
        assert any("name" in e for e in errors)

    def test_bad_name_and_category(self, registry):
        errors = registry.validate_definition({"name": "Hero", "category": "fancy"})
        assert len(errors) == 2

    def test_non_mapping_defaults(self, registry):
        errors = registry.validate_definition({"name": "acme/x", "default_content": [1, 2]})
        assert any("default_content" in e for e in errors)

    def test_not_a_mapping(self, registry):
        assert registry.validate_definition(["nope"]) != []

    def test_register(self, registry):
        assert registry.register({"name": "acme/hero", "is_container": True}) == []
        block = registry.get_default_block("acme/hero", "h")
        assert block["children"] == []
        assert registry.register({"name": "bad"}) != []


class TestYamlLoading:

    @pytest.fixture
    def types_dir(self, tmp_path):
        (tmp_path / "hero.yaml").write_text(
            "name: acme/hero\n"
            "label: Hero\n"
            "category: layout\n"
            "default_content:\n"
            "  kind: text\n"
            "  value: Welcome\n"
            "default_styles:\n"
            "  padding: 40px\n",
            encoding="utf-8",
        )
        (tmp_path / "broken.yml").write_text("name: [unclosed\n", encoding="utf-8")
        (tmp_path / "invalid.yaml").write_text("name: NotValid\n", encoding="utf-8")
        return tmp_path

    def test_loads_valid_files(self, types_dir):
        registry = BlockTypeRegistry(types_dir)
        block = registry.get_default_block("acme/hero", "h")
        assert block["content"]["value"] == "Welcome"
        assert block["styles"]["padding"] == "40px"
        assert block["styles"]["margin"] == BASE_STYLES["margin"]

    def test_collects_errors(self, types_dir):
        registry = BlockTypeRegistry(types_dir)
        errors = registry.validation_errors()
        assert set(errors) == {"broken.yml", "invalid.yaml"}

    def test_without_builtins(self, types_dir):
        registry = BlockTypeRegistry(types_dir, include_builtins=False)
        assert registry.list_types() == ["acme/hero"]

    def test_clear_cache_reloads(self, types_dir):
        registry = BlockTypeRegistry(types_dir)
        assert "acme/hero" in registry.list_types()
        (types_dir / "hero.yaml").unlink()
        registry.clear_cache()
        assert "acme/hero" not in registry.list_types()
        assert "core/heading" in registry.list_types()

    def test_missing_directory(self, tmp_path):
        registry = BlockTypeRegistry(tmp_path / "absent")
        assert registry.load_directory() == 0
