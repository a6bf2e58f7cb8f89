from mosaic_redact.config import Settings
from mosaic_redact.detection import TextBox
from mosaic_redact.geometry import NormalizedRect
from mosaic_redact.io.loaders import PageRaster
from mosaic_redact.pipeline.redact import redact_pages
from mosaic_redact.regions import Region


def test_inactive_region_is_not_pixelated(random_raster):
    raster = random_raster(60, 60, seed=3)
    region = Region.from_dict({"x": 0.1, "y": 0.1, "width": 0.5, "height": 0.5, "active": False})

    result = redact_pages([PageRaster(page=1, raster=raster)], [region], settings=Settings())

    assert result.outputs[0] == raster
    record = result.summary.pages[0].regions[0]
    assert record.active is False
    assert result.summary.pages[0].rejected == 0


def test_mixed_rects_and_regions(random_raster):
    raster = random_raster(60, 60, seed=4)
    items = [NormalizedRect(0.1, 0.1, 0.4, 0.4), Region(rect=NormalizedRect(0.5, 0.5, 0.01, 0.3))]

    result = redact_pages([PageRaster(page=1, raster=raster)], items, settings=Settings())

    page = result.summary.pages[0]
    assert len(page.regions) == 1
    assert page.rejected == 1
    assert result.outputs[0] != raster


def test_auto_detect_adds_candidates_per_page(make_detector, random_raster):
    detector = make_detector([TextBox(0.1, 0.1, 0.3, 0.1)])
    pages = [PageRaster(page=n, raster=random_raster(40, 40, seed=n)) for n in (1, 2)]

    result = redact_pages(pages, auto_detect=True, settings=Settings(), detector=detector)

    assert [p.detected for p in result.summary.pages] == [1, 1]
    assert detector.calls == 2
