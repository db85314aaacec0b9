"""Unit tests for resource name derivation (crud_generator.naming).

Tests cover:
- derive_names for simple, snake_case and StudlyCase inputs
- pluralisation rules (regular, -y, -es, -f/-fe, irregular, uncountable)
- fully-qualified class names and namespaces
- invalid names
- immutability of ResourceNames
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from crud_generator.naming import (
    derive_names,
    is_valid_resource_name,
    plural_studly_case,
    pluralize,
    snake_case,
    studly_case,
)


pytestmark = pytest.mark.unit


class TestDeriveNames:
    def test_post(self):
        names = derive_names("Post")
        assert names.studly == "Post"
        assert names.snake == "post"
        assert names.plural_studly == "Posts"
        assert names.plural_snake == "posts"
        assert names.table == "posts"
        assert names.route_segment == "posts"
        assert names.view_dir == "post"

    def test_snake_input_is_studlied(self):
        names = derive_names("blog_post")
        assert names.studly == "BlogPost"
        assert names.snake == "blog_post"
        assert names.plural_snake == "blog_posts"

    def test_studly_input_kept(self):
        names = derive_names("BlogPost")
        assert names.studly == "BlogPost"
        assert names.plural_studly == "BlogPosts"
        assert names.table == "blog_posts"

    def test_lowercase_input(self):
        names = derive_names("category")
        assert names.studly == "Category"
        assert names.plural_snake == "categories"

    def test_surrounding_whitespace_stripped(self):
        assert derive_names("  Post ").studly == "Post"

    def test_class_names(self):
        names = derive_names("Post")
        assert names.model_class == "Post"
        assert names.controller_class == "PostController"
        assert names.model_fqcn == "\\App\\Models\\Post"
        assert names.controller_fqcn == "\\App\\Http\\Controllers\\PostController"

    def test_custom_namespaces(self):
        names = derive_names(
            "Post",
            model_namespace="\\Domain\\Blog\\Models\\",
            controller_namespace="App\\Http\\Controllers\\Admin",
        )
        assert names.model_fqcn == "\\Domain\\Blog\\Models\\Post"
        assert names.controller_fqcn == "\\App\\Http\\Controllers\\Admin\\PostController"

    def test_migration_name(self):
        assert derive_names("BlogPost").migration_name == "create_blog_posts_table"

    def test_label(self):
        assert derive_names("BlogPost").label == "Blog post"

    def test_context_forms_agree(self):
        ctx = derive_names("Category").as_context()
        assert ctx["table"] == ctx["route_segment"] == ctx["plural_snake"] == "categories"
        assert ctx["view_dir"] == ctx["snake"] == "category"

    @pytest.mark.parametrize("bad", ["", "   ", "1post", "post!", "blog.post"])
    def test_invalid_names_rejected(self, bad: str):
        with pytest.raises(ValueError):
            derive_names(bad)

    def test_invalid_name_message_lists_allowed_characters(self):
        with pytest.raises(ValueError, match="letters, digits, underscores, hyphens or spaces"):
            derive_names("post!")

    @pytest.mark.parametrize("name", ["blog-post", "blog post"])
    def test_hyphens_and_spaces_accepted(self, name: str):
        assert derive_names(name).studly == "BlogPost"

    def test_names_are_immutable(self):
        names = derive_names("Post")
        with pytest.raises(ValidationError):
            names.studly = "Other"


class TestPluralize:
    @pytest.mark.parametrize(
        ("word", "plural"),
        [
            ("post", "posts"),
            ("category", "categories"),
            ("day", "days"),
            ("box", "boxes"),
            ("church", "churches"),
            ("class", "classes"),
            ("status", "statuses"),
            ("bus", "buses"),
            ("wolf", "wolves"),
            ("half", "halves"),
            ("knife", "knives"),
            ("roof", "roofs"),
            ("person", "people"),
            ("child", "children"),
            ("mouse", "mice"),
            ("index", "indices"),
            ("quiz", "quizzes"),
            ("analysis", "analyses"),
            ("potato", "potatoes"),
            ("photo", "photos"),
        ],
    )
    def test_rules(self, word: str, plural: str):
        assert pluralize(word) == plural

    @pytest.mark.parametrize("word", ["news", "equipment", "series", "data", "sheep"])
    def test_uncountable(self, word: str):
        assert pluralize(word) == word

    def test_case_preserved(self):
        assert pluralize("Person") == "People"
        assert pluralize("Category") == "Categories"
        assert pluralize("POST") == "POSTS"

    def test_empty(self):
        assert pluralize("") == ""


class TestCaseHelpers:
    def test_studly_case(self):
        assert studly_case("blog_post") == "BlogPost"
        assert studly_case("blog-post") == "BlogPost"
        assert studly_case("blog post") == "BlogPost"
        assert studly_case("blogPost") == "BlogPost"

    def test_snake_case(self):
        assert snake_case("BlogPost") == "blog_post"
        assert snake_case("Post") == "post"
        assert snake_case("HTTPLog") == "http_log"

    def test_plural_studly_only_pluralises_last_word(self):
        assert plural_studly_case("UserCategory") == "UserCategories"
        assert plural_studly_case("SalesPerson") == "SalesPeople"

    def test_plural_studly_keeps_acronyms_whole(self):
        assert plural_studly_case("URL") == "URLS"
        assert plural_studly_case("HTTPLog") == "HTTPLogs"
        assert plural_studly_case("URLItem") == "URLItems"

    @pytest.mark.parametrize(
        ("name", "snake", "plural_snake"),
        [
            ("URL", "url", "urls"),
            ("FAQ", "faq", "faqs"),
            ("HTTPLog", "http_log", "http_logs"),
            ("ShortURL", "short_url", "short_urls"),
        ],
    )
    def test_acronym_names(self, name: str, snake: str, plural_snake: str):
        names = derive_names(name)
        assert names.snake == snake
        assert names.plural_snake == plural_snake

    def test_is_valid_resource_name(self):
        assert is_valid_resource_name("Post")
        assert is_valid_resource_name("blog_post")
        assert not is_valid_resource_name("")
        assert not is_valid_resource_name("x" * 256)
