import threading

import pytest
from PIL import Image

import mosaic_redact.detection.tesseract as tesseract
from mosaic_redact.detection import BOTTOM_LEFT, DetectionAdapter, TesseractTextDetector, normalize_boxes
from mosaic_redact.detection.base import TextBox
from mosaic_redact.raster import RasterBuffer


@pytest.fixture
def image():
    return Image.new("RGB", (100, 50), (255, 255, 255))


def test_top_left_boxes_pass_through(make_detector, image):
    detector = make_detector([TextBox(0.1, 0.2, 0.3, 0.1)])
    with DetectionAdapter(detector) as adapter:
        rects = adapter.detect_sync(image)
    assert len(rects) == 1
    assert rects[0].as_tuple() == pytest.approx((0.1, 0.2, 0.3, 0.1))


def test_bottom_left_boxes_are_flipped(make_detector, image):
    detector = make_detector([TextBox(0.1, 0.7, 0.2, 0.2)], origin=BOTTOM_LEFT)
    with DetectionAdapter(detector) as adapter:
        rects = adapter.detect_sync(image)
    assert rects[0].y == pytest.approx(0.1)


def test_detection_runs_off_caller_thread(make_detector, image):
    detector = make_detector([TextBox(0.1, 0.1, 0.1, 0.1)])
    with DetectionAdapter(detector) as adapter:
        adapter.detect_sync(image)
    assert detector.threads[0] is not threading.current_thread()


def test_detector_failure_resolves_to_empty(make_detector, image):
    detector = make_detector(error=RuntimeError("engine crashed"))
    with DetectionAdapter(detector) as adapter:
        future = adapter.detect_candidate_regions(image)
        assert future.result(timeout=5) == []


def test_malformed_image_resolves_to_empty(make_detector):
    detector = make_detector([TextBox(0.1, 0.1, 0.1, 0.1)])
    with DetectionAdapter(detector) as adapter:
        assert adapter.detect_sync(None, key="missing") == []
        assert adapter.detect_sync(object()) == []
    assert detector.calls == 0


def test_raster_input_is_converted(make_detector):
    detector = make_detector([TextBox(0.0, 0.0, 0.5, 0.5)])
    raster = RasterBuffer.solid(8, 8, (0, 0, 0, 255))
    with DetectionAdapter(detector) as adapter:
        assert len(adapter.detect_sync(raster)) == 1


def test_concurrent_requests_for_same_image_share_one_future(make_detector, image):
    gate = threading.Event()
    detector = make_detector([TextBox(0.1, 0.1, 0.1, 0.1)], gate=gate)
    adapter = DetectionAdapter(detector)
    try:
        first = adapter.detect_candidate_regions(image, key="img")
        second = adapter.detect_candidate_regions(image, key="img")
        assert first is second
        assert adapter.in_flight("img")
        gate.set()
        assert len(first.result(timeout=5)) == 1
        third = adapter.detect_candidate_regions(image, key="img")
        assert third is not first
        third.result(timeout=5)
    finally:
        gate.set()
        adapter.shutdown()
    assert detector.calls == 2


def test_stale_request_is_abandoned_after_timeout(make_detector, image):
    gate = threading.Event()
    now = [0.0]
    detector = make_detector([], gate=gate)
    adapter = DetectionAdapter(detector, timeout=5.0, clock=lambda: now[0])
    try:
        first = adapter.detect_candidate_regions(image, key="img")
        now[0] = 10.0
        second = adapter.detect_candidate_regions(image, key="img")
        assert second is not first
    finally:
        gate.set()
        adapter.shutdown()


def test_detect_sync_times_out_to_empty(make_detector, image):
    gate = threading.Event()
    detector = make_detector([TextBox(0.1, 0.1, 0.1, 0.1)], gate=gate)
    adapter = DetectionAdapter(detector)
    try:
        assert adapter.detect_sync(image, timeout=0.05) == []
    finally:
        gate.set()
        adapter.shutdown()


def test_normalize_boxes_drops_degenerate_and_clips():
    boxes = [
        TextBox(0.5, 0.5, 0.0, 0.1),
        TextBox(float("nan"), 0.1, 0.1, 0.1),
        TextBox(0.9, 0.95, 0.3, 0.2),
    ]
    rects = normalize_boxes(boxes)
    assert len(rects) == 1
    assert rects[0].width == pytest.approx(0.1)
    assert rects[0].height == pytest.approx(0.05)
    with pytest.raises(ValueError):
        normalize_boxes([], origin="center")


def _fake_data():
    return {
        "text": ["Call", "13812345678", "", "Hello"],
        "left": [10, 35, 0, 10],
        "top": [10, 10, 0, 30],
        "width": [20, 40, 0, 30],
        "height": [10, 12, 0, 10],
        "conf": ["95", 85, -1, 70],
        "block_num": [1, 1, 1, 1],
        "par_num": [1, 1, 1, 1],
        "line_num": [1, 1, 1, 2],
        "word_num": [1, 2, 0, 1],
    }


def test_tesseract_detector_groups_words_into_lines(monkeypatch, image):
    seen = {}

    def fake_image_to_data(_im, lang, config, output_type):
        seen["lang"] = lang
        seen["config"] = config
        return _fake_data()

    monkeypatch.setattr(tesseract.pytesseract, "image_to_data", fake_image_to_data)
    boxes = TesseractTextDetector(lang="eng", psm=11).detect(image)

    assert "--psm 11" in seen["config"]
    assert "load_system_dawg=0" in seen["config"]
    assert seen["lang"] == "eng"
    assert [b.text for b in boxes] == ["Call 13812345678", "Hello"]
    first = boxes[0]
    assert (first.x, first.y, first.width, first.height) == pytest.approx((0.1, 0.2, 0.65, 0.24))
    assert first.conf == pytest.approx(90.0)


def test_tesseract_detector_filters_low_confidence(monkeypatch, image):
    monkeypatch.setattr(tesseract.pytesseract, "image_to_data", lambda *_a, **_k: _fake_data())
    boxes = TesseractTextDetector(min_confidence=80).detect(image)
    assert [b.text for b in boxes] == ["Call 13812345678"]


def test_normalize_boxes_clips_negative_origin_top_left():
    rects = normalize_boxes([TextBox(-0.1, 0.0, 0.3, 0.3)])
    assert rects[0].x == 0.0
    assert rects[0].width == pytest.approx(0.2)
    assert rects[0].height == pytest.approx(0.3)


def test_normalize_boxes_clips_overhang_bottom_left():
    rects = normalize_boxes([TextBox(0.5, 0.9, 0.2, 0.2), TextBox(0.1, -0.1, 0.2, 0.3)], origin=BOTTOM_LEFT)
    top, bottom = rects
    assert top.y == 0.0
    assert top.height == pytest.approx(0.1)
    assert bottom.y == pytest.approx(0.8)
    assert bottom.height == pytest.approx(0.2)


def test_normalize_boxes_drops_box_outside_image():
    assert normalize_boxes([TextBox(1.2, 0.1, 0.2, 0.2)]) == []
