"""Tests for ingestion data models and response schemas."""

import pytest

from sticker_pipeline.schemas.models import (
    AssetDescriptor,
    FetchedAsset,
    IngestionReport,
    OutcomeStatus,
    UploadFailed,
    UploadSkipped,
    UploadSuccess,
    is_valid_collection_id,
    storage_path,
)
from sticker_pipeline.schemas.responses import IngestResponse


def _success(index: int, animated: bool = False) -> UploadSuccess:
    return UploadSuccess(
        sequence_index=index,
        storage_path=f"cattos/sticker_{index}.webp",
        byte_length=10 * index,
        mime_type="image/webp",
        is_animated=animated,
    )


class TestCollectionId:
    @pytest.mark.parametrize("value", ["cattos", "Doggos_by_fStikBot", "pack-01", "a" * 64])
    def test_valid(self, value):
        assert is_valid_collection_id(value)

    @pytest.mark.parametrize("value", ["", "a b", "../x", "a/b", "a" * 65, "émoji"])
    def test_invalid(self, value):
        assert not is_valid_collection_id(value)

    def test_storage_path(self):
        assert storage_path("cattos", 12, "tgs") == "cattos/sticker_12.tgs"


class TestFetchedAsset:
    def test_byte_length_and_repr_hides_payload(self):
        d = AssetDescriptor(source_ref="f", sequence_index=1, collection_id="cattos")
        fetched = FetchedAsset(descriptor=d, data=b"\x00" * 5)

        assert fetched.byte_length == 5
        assert "\\x00" not in repr(fetched)


class TestIngestionReport:
    def test_counts_derived_from_outcomes(self):
        report = IngestionReport.from_outcomes(
            "cattos",
            [
                UploadFailed(sequence_index=4, reason="store error: HTTP 500"),
                _success(1, animated=True),
                UploadSkipped(sequence_index=3, reason="oversize: 60 MiB"),
                _success(2),
            ],
        )

        assert report.total_discovered == 4
        assert (report.uploaded, report.skipped, report.failed) == (2, 1, 1)
        assert report.animated_count == 1
        assert [o.sequence_index for o in report.outcomes] == [1, 2, 3, 4]
        assert [o.status for o in report.outcomes] == [
            OutcomeStatus.SUCCESS,
            OutcomeStatus.SUCCESS,
            OutcomeStatus.SKIPPED,
            OutcomeStatus.FAILED,
        ]
        assert [s.sequence_index for s in report.successes] == [1, 2]

    def test_mismatched_total_rejected(self):
        with pytest.raises(ValueError, match="outcomes"):
            IngestionReport(collection_id="cattos", total_discovered=3, outcomes=(_success(1),))


class TestIngestResponse:
    def test_from_report(self):
        report = IngestionReport.from_outcomes(
            "cattos",
            [
                _success(1),
                _success(2, animated=True),
                UploadFailed(sequence_index=3, reason="transport error: timeout", error_category="transient"),
            ],
        )

        response = IngestResponse.from_report(report)

        assert response.message == "Uploaded 2/3 stickers from cattos"
        assert (response.total, response.uploaded, response.animated) == (3, 2, 1)
        assert response.failed == 1
        assert [d.filename for d in response.details] == [
            "cattos/sticker_1.webp",
            "cattos/sticker_2.webp",
        ]
        assert response.details[1].isAnimated is True
        assert response.details[0].size == 10
        assert response.errors[0].index == 3
        assert response.errors[0].status == "failed"

    def test_model_dump_keys(self):
        report = IngestionReport.from_outcomes("cattos", [_success(1)])
        dumped = IngestResponse.from_report(report).model_dump()

        assert set(dumped) >= {"message", "total", "uploaded", "animated", "details"}
        assert dumped["details"][0]["contentType"] == "image/webp"
