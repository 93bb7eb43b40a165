"""Unit tests for the store backends."""

import pytest

from url_cleaner.errors import NotFoundError, ProfileExistsError, StorageError
from url_cleaner.models import ImportScope, ProfileScope, URLFilters, URLRecord


def _record(profile, imp, url, cleaned=None, domain="example.com", is_duplicate=False):
    return URLRecord(
        profile_id=profile.id,
        import_id=imp.id,
        original_url=url,
        cleaned_url=cleaned or url,
        domain=domain,
        is_duplicate=is_duplicate,
    )


class TestProfiles:
    """Tests for profile bookkeeping."""

    def test_find_or_create_profile(self, store):
        first = store.find_or_create_profile("alice")
        second = store.find_or_create_profile("alice")
        assert first.id == second.id
        assert store.get_profile(first.id).name == "alice"

    def test_profile_names_are_case_sensitive(self, store):
        assert store.find_or_create_profile("Alice").id != store.find_or_create_profile("alice").id

    def test_create_existing_profile_fails(self, store):
        store.create_profile("alice")
        with pytest.raises(ProfileExistsError):
            store.create_profile("alice")

    def test_list_profiles_counts(self, store):
        alice = store.create_profile("alice")
        store.create_profile("bob")
        imp = store.create_import(alice.id, "first")
        store.add_urls([_record(alice, imp, "https://a.com/1"), _record(alice, imp, "https://a.com/2")])

        profiles = store.list_profiles()
        assert [profile.name for profile in profiles] == ["bob", "alice"]
        assert profiles[1].import_count == 1
        assert profiles[1].url_count == 2
        assert profiles[0].url_count == 0


class TestImports:
    """Tests for import bookkeeping."""

    def test_list_imports_newest_first_with_counts(self, store):
        profile = store.create_profile("alice")
        older = store.create_import(profile.id, "older")
        newer = store.create_import(profile.id, "newer")
        store.add_urls(
            [
                _record(profile, older, "https://a.com/1"),
                _record(profile, older, "https://a.com/1", is_duplicate=True),
            ]
        )

        summaries = store.list_imports(profile.id)
        assert [summary.id for summary in summaries] == [newer.id, older.id]
        assert summaries[1].url_count == 2
        assert summaries[1].duplicate_count == 1
        assert summaries[0].url_count == 0

    def test_delete_import_cascades(self, store):
        profile = store.create_profile("alice")
        keep = store.create_import(profile.id, "keep")
        drop = store.create_import(profile.id, "drop")
        store.add_urls([_record(profile, keep, "https://a.com/keep")])
        store.add_urls([_record(profile, drop, "https://a.com/drop")])

        store.delete_import(drop.id)

        assert store.get_import(drop.id) is None
        remaining = store.list_profile_urls(profile.id)
        assert [url.original_url for url in remaining] == ["https://a.com/keep"]

    def test_delete_missing_import_raises(self, store):
        with pytest.raises(NotFoundError):
            store.delete_import("missing")


class TestURLRecords:
    """Tests for URL insertion and queries."""

    def test_batch_shares_timestamp_and_orders_by_seq(self, store):
        profile = store.create_profile("alice")
        imp = store.create_import(profile.id, "batch")
        stored = store.add_urls(
            [_record(profile, imp, "https://a.com/1"), _record(profile, imp, "https://a.com/2")]
        )

        assert stored[0].created_at == stored[1].created_at
        assert stored[0].seq < stored[1].seq

    def test_query_orders_newest_first(self, store):
        profile = store.create_profile("alice")
        imp = store.create_import(profile.id, "batch")
        store.add_urls([_record(profile, imp, "https://a.com/1"), _record(profile, imp, "https://a.com/2")])
        store.add_urls([_record(profile, imp, "https://a.com/3")])

        urls = store.query_urls(ImportScope(import_id=imp.id), URLFilters())
        assert [url.original_url for url in urls] == [
            "https://a.com/3",
            "https://a.com/2",
            "https://a.com/1",
        ]

    def test_query_filters_and_counts(self, store):
        profile = store.create_profile("alice")
        imp = store.create_import(profile.id, "batch")
        store.add_urls(
            [
                _record(profile, imp, "https://Foo.com/a", domain="foo.com"),
                _record(profile, imp, "https://bar.com/a", domain="bar.com", is_duplicate=True),
                _record(profile, imp, "https://bar.com/b", domain="bar.com"),
            ]
        )
        scope = ProfileScope(profile_id=profile.id)

        assert store.count_urls(scope, URLFilters(domain="BAR")) == 2
        assert store.count_urls(scope, URLFilters(is_duplicate=True)) == 1
        assert store.count_urls(scope, URLFilters(search="foo")) == 1
        combined = URLFilters(domain="bar", is_duplicate=False, search="/b")
        assert [url.original_url for url in store.query_urls(scope, combined)] == ["https://bar.com/b"]

    def test_query_pagination(self, store):
        profile = store.create_profile("alice")
        imp = store.create_import(profile.id, "batch")
        store.add_urls([_record(profile, imp, f"https://a.com/{index}") for index in range(5)])
        scope = ImportScope(import_id=imp.id)

        page_two = store.query_urls(scope, URLFilters(page=2, page_size=2))
        assert [url.original_url for url in page_two] == ["https://a.com/2", "https://a.com/1"]

    def test_find_earliest_url(self, store):
        profile = store.create_profile("alice")
        imp = store.create_import(profile.id, "batch")
        first, second = store.add_urls(
            [
                _record(profile, imp, "https://a.com/x?ref=1", cleaned="https://a.com/x"),
                _record(profile, imp, "https://a.com/x?ref=2", cleaned="https://a.com/x", is_duplicate=True),
            ]
        )
        (third,) = store.add_urls(
            [_record(profile, imp, "https://a.com/x/", cleaned="https://a.com/x", is_duplicate=True)]
        )

        assert store.find_earliest_url(profile.id, "https://a.com/x").id == first.id
        assert store.find_earliest_url(profile.id, "https://a.com/x", exclude_id=first.id).id == second.id
        assert store.find_earliest_url(profile.id, "https://a.com/x", before=second.created_at) is None
        assert store.find_earliest_url(profile.id, "https://a.com/x", before=third.created_at).id == first.id
        assert store.find_earliest_url(profile.id, "https://other.com/") is None

    def test_profile_stats(self, store):
        profile = store.create_profile("alice")
        imp = store.create_import(profile.id, "batch")
        store.add_urls(
            [
                _record(profile, imp, "https://a.com/1", domain="a.com"),
                _record(profile, imp, "https://a.com/1", domain="a.com", is_duplicate=True),
                _record(profile, imp, "https://b.com/1", domain="b.com"),
            ]
        )

        stats = store.profile_stats(profile.id)
        assert stats.total_urls == 3
        assert stats.duplicate_urls == 1
        assert stats.unique_urls == 2
        assert stats.unique_domains == 2

    def test_add_urls_to_missing_import_fails(self, store):
        profile = store.create_profile("alice")
        imp = store.create_import(profile.id, "batch")
        store.delete_import(imp.id)
        with pytest.raises((NotFoundError, StorageError)):
            store.add_urls([_record(profile, imp, "https://a.com/1")])
