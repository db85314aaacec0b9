"""Tests for the resource controller generator."""

from __future__ import annotations

import pytest

from crud_generator.fields import parse_fields
from crud_generator.scaffolder.controller_gen import (
    CRUD_METHODS,
    ControllerGenerator,
    normalize_controller,
)
from crud_generator.scaffolder.php_outline import outline_class
from crud_generator.scaffolder.results import StepStatus


pytestmark = pytest.mark.unit


FIELDS = parse_fields("title:string,body:text").fields

INDEX_METHOD = """    public function index()
    {
        // newest first
        return view('post.index', ['items' => \\App\\Models\\Post::latest()->get()]);
    }"""

INDEX_ONLY = f"""<?php

namespace App\\Http\\Controllers;

use Illuminate\\Http\\Request;

class PostController extends Controller
{{
{INDEX_METHOD}
}}
"""


@pytest.fixture
def controller_gen(stub_bridge, renderer) -> ControllerGenerator:
    return ControllerGenerator(stub_bridge, renderer)


@pytest.fixture
def controller_path(config):
    return config.controllers_path / "PostController.php"


# ---------------------------------------------------------------------------
# normalize_controller
# ---------------------------------------------------------------------------


class TestNormalize:
    def test_drops_placeholder(self):
        source = "<?php\nclass A\n{\n    //\n}\n"
        assert normalize_controller(source) == "<?php\nclass A\n{\n\n}\n"

    def test_collapses_blank_lines_before_first_method(self):
        source = "<?php\nclass A\n{\n    // old note\n\n\n    public function show($id)\n    {\n    }\n}\n"
        assert normalize_controller(source) == (
            "<?php\nclass A\n{\n    public function show($id)\n    {\n    }\n}\n"
        )

    def test_keeps_comments_inside_methods(self):
        assert "// newest first" in normalize_controller(INDEX_ONLY)

    def test_no_class(self):
        source = "<?php\n// just a comment\n"
        assert normalize_controller(source) == source


# ---------------------------------------------------------------------------
# add_methods
# ---------------------------------------------------------------------------


class TestAddMethods:
    def test_index_only_gets_other_six(self, controller_gen, post_names):
        patched, added = controller_gen.add_methods(INDEX_ONLY, post_names, FIELDS)

        assert added == ["create", "store", "show", "edit", "update", "destroy"]
        assert INDEX_METHOD in patched
        assert patched.count("public function index()") == 1

        outline = outline_class(patched, "PostController")
        assert all(outline.has_method(m) for m in CRUD_METHODS)
        assert patched.endswith("    }\n}\n")

    def test_methods_follow_fixed_order(self, controller_gen, post_names):
        patched, _ = controller_gen.add_methods(INDEX_ONLY, post_names, FIELDS)
        positions = [patched.index(f"public function {m}(") for m in CRUD_METHODS]
        assert positions == sorted(positions)

    def test_inserted_block_is_separated(self, controller_gen, post_names):
        patched, _ = controller_gen.add_methods(INDEX_ONLY, post_names, FIELDS)
        assert "    }\n\n    public function create()" in patched
        assert "    }\n\n    public function destroy($id)" in patched

    def test_validation_rules(self, controller_gen, post_names):
        patched, _ = controller_gen.add_methods(INDEX_ONLY, post_names, FIELDS)
        assert patched.count("'title' => 'required',") == 2
        assert patched.count("'body' => 'required',") == 2

    def test_all_present_is_noop(self, controller_gen, post_names):
        full, _ = controller_gen.add_methods(INDEX_ONLY, post_names, FIELDS)
        again, added = controller_gen.add_methods(full, post_names, FIELDS)
        assert added == []
        assert again == full

    def test_method_name_in_comment_does_not_count(self, controller_gen, post_names):
        source = INDEX_ONLY.replace("// newest first", "// see public function show()")
        _, added = controller_gen.add_methods(source, post_names, FIELDS)
        assert "show" in added

    def test_missing_class(self, controller_gen, post_names):
        patched, added = controller_gen.add_methods("<?php\n", post_names, FIELDS)
        assert patched is None
        assert added == []


# ---------------------------------------------------------------------------
# ControllerGenerator.generate
# ---------------------------------------------------------------------------


class TestGenerate:
    @pytest.mark.asyncio
    async def test_from_stub(self, controller_gen, post_names, controller_path):
        result = await controller_gen.generate(post_names, FIELDS)

        assert result.status == StepStatus.CREATED
        assert result.path == controller_path
        assert result.message == "CRUD methods for Post added to the controller."
        assert result.notes == ["Added: index, create, store, show, edit, update, destroy"]

        content = controller_path.read_text(encoding="utf-8")
        assert "{\n    public function index()\n" in content
        assert "//\n" not in content
        assert "$items = \\App\\Models\\Post::all();" in content
        assert "return redirect()->route('posts.index');" in content
        assert "return view('post.edit', compact('item'));" in content

    @pytest.mark.asyncio
    async def test_existing_index_only(self, controller_gen, post_names, controller_path):
        controller_path.write_text(INDEX_ONLY, encoding="utf-8")

        result = await controller_gen.generate(post_names, FIELDS)

        assert result.status == StepStatus.UPDATED
        assert result.notes == ["Added: create, store, show, edit, update, destroy"]
        assert INDEX_METHOD in controller_path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_rerun_is_byte_identical(self, controller_gen, post_names, controller_path):
        await controller_gen.generate(post_names, FIELDS)
        first = controller_path.read_text(encoding="utf-8")

        result = await controller_gen.generate(post_names, FIELDS)

        assert result.status == StepStatus.SKIPPED
        assert result.level == "warning"
        assert result.message == "CRUD methods for Post already exist in the controller."
        assert controller_path.read_text(encoding="utf-8") == first

    @pytest.mark.asyncio
    async def test_class_not_found(self, controller_gen, post_names, controller_path):
        controller_path.write_text("<?php\n", encoding="utf-8")
        result = await controller_gen.generate(post_names, FIELDS)
        assert result.status == StepStatus.SKIPPED
        assert result.level == "warning"
        assert controller_path.read_text(encoding="utf-8") == "<?php\n"

    @pytest.mark.asyncio
    async def test_missing_file_silently_skipped(self, controller_gen, post_names, config, monkeypatch):
        async def make_controller(names):
            return config.controllers_path / "PostController.php"

        monkeypatch.setattr(controller_gen.bridge, "make_controller", make_controller)
        result = await controller_gen.generate(post_names, FIELDS)

        assert result.status == StepStatus.SKIPPED
        assert result.level == "silent"
