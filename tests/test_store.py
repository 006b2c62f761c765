"""
Tests for the flat-file SnippetStore.

Every test works on a real file under tmp_path.
"""

import pytest

from rcs.codec import encode_line
from rcs.errors import DuplicateError, InvalidIdError, NotFoundError, ValidationError
from rcs.ids import generate_id
from rcs.store import SnippetStore
from rcs.types import ID_LENGTH, Snippet


def _lines(store):
    return store.path.read_text(encoding="utf-8").splitlines()


# -----------------------------------------------------------------------------
# Add / get
# -----------------------------------------------------------------------------

class TestAdd:
    def test_add_assigns_id_and_appends_line(self, store):
        s = store.add(Snippet(category="go", tags="http", content="srv.Shutdown(ctx)"))
        assert s.id == generate_id(Snippet(category="go", tags="http"))
        assert _lines(store) == [encode_line(s)]

    def test_add_creates_parent_directories(self, tmp_path):
        store = SnippetStore(tmp_path / "nested" / "dir" / "segfile.rcs")
        store.add(Snippet(category="go", content="x"))
        assert store.path.exists()

    def test_add_keeps_given_id(self, store):
        s = store.add(Snippet(id="Z" * ID_LENGTH, category="go", content="x"))
        assert s.id == "Z" * ID_LENGTH

    def test_same_classification_collides(self, store):
        """Id depends on category+tags only: different content still collides."""
        store.add(Snippet(category="go", tags="http", content="one"))
        with pytest.raises(DuplicateError, match="id"):
            store.add(Snippet(category="go", tags="http", content="two"))
        assert store.count() == 1

    def test_same_content_collides(self, store):
        store.add(Snippet(category="go", tags="http", content="same"))
        with pytest.raises(DuplicateError, match="content"):
            store.add(Snippet(category="python", tags="web", content="same"))
        assert store.count() == 1

    def test_empty_classification_rejected(self, store):
        with pytest.raises(ValidationError):
            store.add(Snippet(content="x"))
        assert not store.path.exists()

    def test_delimiter_rejected(self, store):
        with pytest.raises(ValidationError):
            store.add(Snippet(category="a|b", content="x"))

    @pytest.mark.parametrize("category,tags", [
        ("go\nweb", "http"),
        ("go", "http\r\n"),
        ("go", "a\u2028b"),
    ])
    def test_line_break_rejected(self, store, category, tags):
        with pytest.raises(ValidationError, match="line breaks"):
            store.add(Snippet(category=category, tags=tags, content="body"))
        assert not store.path.exists()

    def test_short_given_id_rejected(self, store):
        with pytest.raises(InvalidIdError):
            store.add(Snippet(id="abc", category="go", content="x"))
        assert not store.path.exists()


class TestGetById:
    def test_get(self, seeded):
        store, snippets = seeded
        assert store.get_by_id(snippets["pool"].id) == snippets["pool"]

    def test_prefix_longer_than_id_length(self, seeded):
        """A line matches when it starts with the requested id."""
        store, snippets = seeded
        s = snippets["venv"]
        assert store.get_by_id(f"{s.id}|{s.category}") == s

    def test_short_id_invalid(self, seeded):
        store, snippets = seeded
        with pytest.raises(InvalidIdError):
            store.get_by_id(snippets["pool"].id[:10])

    def test_unknown_id(self, seeded):
        store, _ = seeded
        with pytest.raises(NotFoundError):
            store.get_by_id("Q" * ID_LENGTH)

    def test_missing_file(self, store):
        with pytest.raises(NotFoundError, match="does not exist"):
            store.get_by_id("Q" * ID_LENGTH)


# -----------------------------------------------------------------------------
# Remove
# -----------------------------------------------------------------------------

class TestRemove:
    def test_remove(self, seeded):
        store, snippets = seeded
        before = store.path.read_text(encoding="utf-8")
        target = snippets["waitgroup"].id

        assert store.remove(target) == 1

        with pytest.raises(NotFoundError):
            store.get_by_id(target)
        assert store.count() == len(snippets) - 1
        assert store.backup_path.name == "segfile.rcs.old"
        assert store.backup_path.read_text(encoding="utf-8") == before

    def test_remove_keeps_order_of_others(self, seeded):
        store, snippets = seeded
        store.remove(snippets["fanin"].id)
        assert [s.id for s in store.all()] == [
            snippets["waitgroup"].id, snippets["pool"].id, snippets["venv"].id,
        ]

    def test_backup_is_overwritten(self, seeded):
        store, snippets = seeded
        store.remove(snippets["fanin"].id)
        second_before = store.path.read_text(encoding="utf-8")
        store.remove(snippets["pool"].id)
        assert store.backup_path.read_text(encoding="utf-8") == second_before

    def test_short_id_invalid(self, seeded):
        store, _ = seeded
        with pytest.raises(InvalidIdError):
            store.remove("abc")

    def test_unknown_id_leaves_file_alone(self, seeded):
        store, _ = seeded
        before = store.path.read_text(encoding="utf-8")
        with pytest.raises(NotFoundError):
            store.remove("Q" * ID_LENGTH)
        assert store.path.read_text(encoding="utf-8") == before
        assert not store.backup_path.exists()

    def test_missing_file(self, store):
        with pytest.raises(NotFoundError):
            store.remove("Q" * ID_LENGTH)

    def test_malformed_lines_survive_rewrite(self, seeded):
        store, snippets = seeded
        with open(store.path, "a", encoding="utf-8") as f:
            f.write("garbage line\n")
        store.remove(snippets["venv"].id)
        assert _lines(store)[-1] == "garbage line"


# -----------------------------------------------------------------------------
# Update / append / replace
# -----------------------------------------------------------------------------

class TestUpdate:
    def test_non_empty_fields_overwrite(self, seeded):
        store, snippets = seeded
        old = snippets["pool"]
        updated = store.update(Snippet(id=old.id, description="new desc"))
        assert updated == old.replace(description="new desc")
        assert store.get_by_id(old.id) == updated

    def test_id_kept_when_classification_changes(self, seeded):
        store, snippets = seeded
        old = snippets["venv"]
        updated = store.update(Snippet(id=old.id, tags="tooling,venv,uv"))
        assert updated.id == old.id
        assert store.get_by_id(old.id).tags == "tooling,venv,uv"
        assert store.count() == len(snippets)

    def test_content_collision_rejected_and_store_unchanged(self, seeded):
        store, snippets = seeded
        before = store.path.read_text(encoding="utf-8")
        with pytest.raises(DuplicateError):
            store.update(Snippet(id=snippets["venv"].id, content=snippets["pool"].content))
        assert store.path.read_text(encoding="utf-8") == before

    def test_same_content_is_not_a_self_collision(self, seeded):
        store, snippets = seeded
        old = snippets["venv"]
        assert store.update(Snippet(id=old.id, content=old.content)) == old

    def test_unknown_id(self, seeded):
        store, _ = seeded
        with pytest.raises(NotFoundError):
            store.update(Snippet(id="Q" * ID_LENGTH, content="x"))


class TestAppend:
    @pytest.mark.parametrize("content,extra", [
        ("foo", "extra"),
        ("foo\n", "extra"),
        ("foo", "\nextra"),
        ("foo\n\n", "\n\nextra"),
    ])
    def test_exactly_one_newline(self, store, content, extra):
        s = store.add(Snippet(category="c", tags="t", content=content))
        assert store.append(s.id, extra).content == "foo\nextra"
        assert store.get_by_id(s.id).content == "foo\nextra"

    def test_keeps_position_count(self, seeded):
        store, snippets = seeded
        store.append(snippets["fanin"].id, "// more")
        assert store.count() == len(snippets)


class TestReplace:
    def test_remove_then_add_in_one_rewrite(self, seeded):
        store, snippets = seeded
        new = store.replace(
            [snippets["pool"].id, snippets["venv"].id],
            Snippet(category="python", tags="misc", content="merged"),
        )
        assert store.count() == len(snippets) - 1
        assert store.get_by_id(new.id).content == "merged"
        assert store.backup_path.exists()

    def test_failed_add_keeps_removed_records(self, seeded):
        store, snippets = seeded
        before = store.path.read_text(encoding="utf-8")
        with pytest.raises(DuplicateError):
            store.replace(
                [snippets["pool"].id],
                Snippet(category="x", tags="y", content=snippets["venv"].content),
            )
        assert store.path.read_text(encoding="utf-8") == before

    def test_unknown_id(self, seeded):
        store, snippets = seeded
        with pytest.raises(NotFoundError):
            store.replace(["Q" * ID_LENGTH], Snippet(category="x", content="y"))


# -----------------------------------------------------------------------------
# Search / scan / stats
# -----------------------------------------------------------------------------

class TestSearch:
    def test_empty_request_returns_all_in_insertion_order(self, seeded):
        store, snippets = seeded
        assert [s.id for s in store.search("", "")] == [s.id for s in snippets.values()]

    def test_hierarchy_search(self, seeded):
        store, snippets = seeded
        found = {s.id for s in store.search("go", "concurrency")}
        assert found == {snippets["fanin"].id, snippets["waitgroup"].id}

    def test_tags_only(self, seeded):
        store, snippets = seeded
        found = [s.id for s in store.search("", "concurrency")]
        assert found == [snippets["fanin"].id, snippets["waitgroup"].id, snippets["pool"].id]

    def test_missing_file_is_empty(self, store):
        result = store.search("go", "x")
        assert len(result) == 0
        assert result.warnings == []

    def test_malformed_line_skipped_with_warning(self, seeded):
        store, snippets = seeded
        with open(store.path, "a", encoding="utf-8") as f:
            f.write("broken|line\n")
        result = store.search("", "")
        assert len(result) == len(snippets)
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("line 5:")

    def test_blank_lines_ignored(self, store):
        s = Snippet(id="A" * ID_LENGTH, category="c", tags="t", content="x")
        store.path.write_text("\n" + encode_line(s) + "\n\n", encoding="utf-8")
        result = store.all()
        assert result.snippets == [s]
        assert result.warnings == []


class TestStats:
    def test_stats(self, seeded):
        store, _ = seeded
        stats = store.get_stats()
        assert stats.total == 4
        assert stats.categories == ["go-concurrency", "go", "python"]
        assert stats.tags == ["channels", "concurrency", "testing", "tooling", "venv"]
        assert stats.category_counts == {"go-concurrency": 1, "go": 1, "python": 2}
        assert stats.category_tags["python"] == ["concurrency", "tooling", "venv"]
        assert stats.tag_counts["concurrency"] == 2
        assert stats.tag_categories["concurrency"] == ["go", "python"]

    def test_record_without_category(self, store):
        store.add(Snippet(tags="shell", content="ls -la"))
        stats = store.get_stats()
        assert stats.total == 1
        assert stats.categories == []
        assert stats.tag_counts == {"shell": 1}
        assert stats.tag_categories == {"shell": []}

    def test_missing_file(self, store):
        stats = store.get_stats()
        assert stats.total == 0
        assert stats.categories == []
