"""Tests for manifest validation."""

import pytest

from promptpack.exceptions import NotReady
from promptpack.manifest import ManifestEntry
from promptpack.store import TemplateStore, load_store
from promptpack.validator import FailureReason, ValidationReport, validate_manifest


@pytest.fixture
def store(plugin_dir, sample_paths):
    return load_store(sample_paths, root=plugin_dir)


@pytest.fixture
def entries(sample_entries):
    return [ManifestEntry(**entry) for entry in sample_entries]


class TestValidateManifest:
    """Test validate_manifest()."""

    def test_all_entries_resolve(self, store, entries):
        report = validate_manifest(entries, store)

        assert report.ok
        assert bool(report) is True
        assert report.failures == ()
        assert report.checked == 4

    def test_nonexistent_path_is_one_not_found(self, store, entries):
        entries.append(
            ManifestEntry(kind="command", identifier="ghost", path="commands/ghost.md")
        )

        report = validate_manifest(entries, store)

        assert not report.ok
        assert len(report.failures) == 1
        failure = report.failures[0]
        assert failure.reason is FailureReason.NOT_FOUND
        assert failure.entry.identifier == "ghost"
        assert "not_found" in str(failure)

    def test_path_mismatch(self, store):
        entry = ManifestEntry(kind="agent", identifier="db-tuner", path="agents/other.md")

        report = validate_manifest([entry], store)

        (failure,) = report.failures
        assert failure.reason is FailureReason.PATH_MISMATCH
        assert "agents/db-tuner.md" in failure.detail

    def test_command_identifier_matches_file_stem_spelling(self, store):
        entry = ManifestEntry(kind="command", identifier="API_New", path="commands/api/api-new.md")

        report = validate_manifest([entry], store)

        assert report.ok

    def test_wrong_kind_is_not_found(self, store):
        entry = ManifestEntry(kind="agent", identifier="lint", path="commands/misc/lint.md")

        report = validate_manifest([entry], store)

        assert report.failures[0].reason is FailureReason.NOT_FOUND

    def test_every_failure_reported_in_order(self, store):
        bad = [
            ManifestEntry(kind="command", identifier="a", path="commands/a.md"),
            ManifestEntry(kind="command", identifier="lint", path="commands/lint.md"),
            ManifestEntry(kind="agent", identifier="b", path="agents/b.md"),
        ]

        report = validate_manifest(bad, store)

        assert [f.entry.identifier for f in report.failures] == ["a", "lint", "b"]
        assert [f.reason for f in report.failures] == [
            FailureReason.NOT_FOUND,
            FailureReason.PATH_MISMATCH,
            FailureReason.NOT_FOUND,
        ]
        assert report.checked == 3

    def test_failures_are_logged(self, store, caplog):
        entry = ManifestEntry(kind="command", identifier="ghost", path="commands/ghost.md")

        validate_manifest([entry], store)

        assert "ghost" in caplog.text

    def test_empty_manifest(self, store):
        assert validate_manifest([], store) == ValidationReport()

    def test_unloaded_store_fails(self, entries):
        with pytest.raises(NotReady):
            validate_manifest(entries, TemplateStore())

    def test_undeclared_documents_are_not_failures(self, store, entries):
        report = validate_manifest(entries[:1], store)

        assert report.ok
