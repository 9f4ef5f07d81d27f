"""Unit tests for reference aggregation."""

from datetime import UTC, datetime

from research_assistant.models import Reference, SourceDocument
from research_assistant.services.references import collect_references, format_reference


def make_document(document_id: str, references: list[Reference]) -> SourceDocument:
    return SourceDocument(
        id=document_id,
        filename=f"{document_id}.pdf",
        references=references,
        createdAt=datetime.now(UTC),
    )


class TestFormatReference:
    """Tests for format_reference."""

    def test_full_reference(self):
        ref = Reference(id="r1", authors=["Smith, J.", "Doe, A."], title="On Sleep", year=2020, journal="Nature")
        assert format_reference(ref) == "Smith, J., Doe, A. (2020). On Sleep. Nature."

    def test_missing_fields(self):
        assert format_reference(Reference(id="r1")) == "Unknown (n.d.). Untitled."

    def test_string_year(self):
        ref = Reference(id="r1", authors=["Smith, J."], title="Preprint", year="2021a")
        assert format_reference(ref) == "Smith, J. (2021a). Preprint."


class TestCollectReferences:
    """Tests for collect_references."""

    def test_sequential_ids_across_documents(self):
        documents = [
            make_document("d1", [Reference(id="a", title="First"), Reference(id="b", title="Second")]),
            make_document("d2", [Reference(id="a", title="Third")]),
        ]

        refs = collect_references(documents)

        assert [r.id for r in refs] == ["ref_1", "ref_2", "ref_3"]
        assert [r.index for r in refs] == [1, 2, 3]
        assert [r.sourceDocumentId for r in refs] == ["d1", "d1", "d2"]
        assert [r.sourceRefId for r in refs] == ["a", "b", "a"]

    def test_raw_text_preferred(self):
        documents = [make_document("d1", [Reference(id="a", title="T", rawText="Raw citation text.")])]

        refs = collect_references(documents)

        assert refs[0].formatted == "Raw citation text."

    def test_formatted_when_no_raw_text(self):
        documents = [make_document("d1", [Reference(id="a", authors=["X"], title="T", year=1999)])]

        refs = collect_references(documents)

        assert refs[0].formatted == "X (1999). T."

    def test_dedupe_by_doi_case_insensitive(self):
        documents = [
            make_document("d1", [Reference(id="a", title="Paper", doi="10.1/ABC")]),
            make_document("d2", [Reference(id="b", title="Paper (reprint)", doi="10.1/abc")]),
        ]

        refs = collect_references(documents)

        assert len(refs) == 1
        assert refs[0].sourceDocumentId == "d1"

    def test_dedupe_by_title_and_year(self):
        documents = [
            make_document("d1", [Reference(id="a", title="Deep Sleep!", year=2010)]),
            make_document("d2", [
                Reference(id="b", title="deep  sleep", year=2010),
                Reference(id="c", title="Deep Sleep", year=2011),
            ]),
        ]

        refs = collect_references(documents)

        assert [r.sourceRefId for r in refs] == ["a", "c"]
        assert [r.index for r in refs] == [1, 2]

    def test_entries_without_title_or_doi_kept(self):
        documents = [make_document("d1", [Reference(id="a"), Reference(id="b")])]
        assert len(collect_references(documents)) == 2

    def test_no_references(self):
        assert collect_references([make_document("d1", [])]) == []
