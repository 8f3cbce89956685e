"""Tests for render response extraction."""

from core.camera import extract_image_list, extract_job_id, normalize_image
from core.camera.extract import extract_error_message, extract_status


class TestNormalizeImage:
    """Tests for normalize_image."""

    def test_passthrough_urls(self):
        assert normalize_image("https://cdn.example.com/a.png") == "https://cdn.example.com/a.png"
        assert normalize_image("data:image/jpeg;base64,AAA") == "data:image/jpeg;base64,AAA"

    def test_raw_base64_wrapped(self):
        assert normalize_image("iVBORw0") == "data:image/png;base64,iVBORw0"

    def test_rejects_non_strings(self):
        assert normalize_image("") is None
        assert normalize_image(None) is None
        assert normalize_image({"url": "x"}) is None
        assert normalize_image(12) is None


class TestExtractImageList:
    """Tests for extract_image_list."""

    def test_runpod_output_images(self):
        """RunPod envelope with a list of wrapped images."""
        payload = {
            "status": "COMPLETED",
            "output": {"images": [{"filename": "a.png", "data": "AAA"}, {"url": "https://x/b.png"}]},
        }
        assert extract_image_list(payload) == [
            "data:image/png;base64,AAA",
            "https://x/b.png",
        ]

    def test_top_level_images(self):
        payload = {"status": "COMPLETED", "images": ["https://x/a.png"]}
        assert extract_image_list(payload) == ["https://x/a.png"]

    def test_result_wrapper(self):
        payload = {"result": {"outputs": [{"image": "BBB"}]}}
        assert extract_image_list(payload) == ["data:image/png;base64,BBB"]

    def test_single_image_field(self):
        payload = {"output": {"output_image_base64": "CCC"}}
        assert extract_image_list(payload) == ["data:image/png;base64,CCC"]

    def test_payload_image_fallback(self):
        payload = {"output": {"progress": 0.4}, "image": "https://x/c.png"}
        assert extract_image_list(payload) == ["https://x/c.png"]

    def test_list_wins_over_single(self):
        payload = {"output": {"images": ["https://x/list.png"], "image": "https://x/single.png"}}
        assert extract_image_list(payload) == ["https://x/list.png"]

    def test_empty_list_falls_through(self):
        """A list without usable entries does not stop the search."""
        payload = {"output": {"images": [None, ""], "message": "https://x/m.png"}}
        assert extract_image_list(payload) == ["https://x/m.png"]

    def test_nothing_found(self):
        assert extract_image_list({"id": "job-1", "status": "IN_QUEUE"}) == []
        assert extract_image_list(None) == []
        assert extract_image_list("oops") == []


class TestExtractJobId:
    """Tests for extract_job_id."""

    def test_id_fields(self):
        assert extract_job_id({"id": "a"}) == "a"
        assert extract_job_id({"jobId": "b"}) == "b"
        assert extract_job_id({"job_id": "c"}) == "c"
        assert extract_job_id({"output": {"id": "d"}}) == "d"

    def test_order(self):
        assert extract_job_id({"job_id": "c", "id": "a"}) == "a"

    def test_missing(self):
        assert extract_job_id({"status": "ok"}) is None
        assert extract_job_id({"id": ""}) is None


class TestExtractHelpers:
    """Tests for error and status helpers."""

    def test_error_message(self):
        assert extract_error_message({"error": "bad"}, "fallback") == "bad"
        assert extract_error_message({"error": "", "message": "m"}, "fallback") == "m"
        assert extract_error_message({}, "fallback") == "fallback"
        assert extract_error_message("text", "fallback") == "fallback"

    def test_status(self):
        assert extract_status({"status": "IN_PROGRESS"}) == "in_progress"
        assert extract_status({"state": "Failed"}) == "failed"
        assert extract_status({}) == ""
