"""Unit tests for TextRecognizer and the OCR engine adapters."""
import asyncio
import sys
import threading
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from pricesnap.core.cancellation import CancellationToken
from pricesnap.core.image_processor import FramePreprocessor
from pricesnap.core.text_recognizer import (
    CHAR_WHITELIST,
    EasyOcrEngine,
    RegionFractions,
    TesseractEngine,
    TextRecognizer,
    clamp_region,
    default_region_of_interest,
    engine_factory,
)
from pricesnap.core.types import PixelBox
from pricesnap.errors import Cancelled, RecognitionError

from conftest import FakeEngine, make_frame


@pytest.fixture
def binarized():
    """A 200x100 preprocessed frame."""
    return FramePreprocessor().preprocess(make_frame(width=200, height=100))


class TestRegionOfInterest:
    def test_default_region_is_centered(self):
        assert default_region_of_interest(1000, 500) == PixelBox(200, 150, 800, 350)

    def test_custom_fractions(self):
        region = default_region_of_interest(100, 100, RegionFractions(0, 0, 0.5, 0.25))
        assert region == PixelBox(0, 0, 50, 25)

    def test_clamp_to_frame(self):
        assert clamp_region(PixelBox(-10, -10, 500, 500), 100, 80) == PixelBox(0, 0, 100, 80)

    def test_clamp_outside_frame(self):
        assert clamp_region(PixelBox(200, 200, 300, 300), 100, 80) is None


class TestTextRecognizer:
    """Test suite for the per-call engine lifecycle and coordinate handling."""

    @pytest.mark.asyncio
    async def test_reads_region_and_offsets_tokens(self, binarized, fake_engine):
        recognizer = TextRecognizer(make_engine=lambda: fake_engine)
        result = await recognizer.recognize(binarized)

        # 200x100 frame -> region (40, 30)-(160, 70)
        assert fake_engine.images[0].shape == (40, 120)
        assert result.text == "$12.50"
        assert result.tokens[0].box == PixelBox(45, 34, 85, 46)
        assert fake_engine.loaded and fake_engine.closed

    @pytest.mark.asyncio
    async def test_explicit_region(self, binarized, fake_engine):
        recognizer = TextRecognizer(make_engine=lambda: fake_engine)
        await recognizer.recognize(binarized, region_of_interest=PixelBox(0, 0, 20, 10))
        assert fake_engine.images[0].shape == (10, 20)

    @pytest.mark.asyncio
    async def test_fresh_engine_per_call(self, binarized):
        engines = []

        def make_engine():
            engine = FakeEngine()
            engines.append(engine)
            return engine

        recognizer = TextRecognizer(make_engine=make_engine)
        await recognizer.recognize(binarized)
        await recognizer.recognize(binarized)

        assert len(engines) == 2
        assert engines[0] is not engines[1]
        assert all(engine.closed for engine in engines)

    @pytest.mark.asyncio
    async def test_load_failure_raises_and_closes(self, binarized):
        engine = FakeEngine(fail_load=True)
        recognizer = TextRecognizer(make_engine=lambda: engine)

        with pytest.raises(RecognitionError):
            await recognizer.recognize(binarized)
        assert engine.closed

    @pytest.mark.asyncio
    async def test_read_failure_raises_and_closes(self, binarized):
        engine = FakeEngine(fail_read=True)
        recognizer = TextRecognizer(make_engine=lambda: engine)

        with pytest.raises(RecognitionError):
            await recognizer.recognize(binarized)
        assert engine.closed

    @pytest.mark.asyncio
    async def test_factory_failure_raises(self, binarized):
        def broken():
            raise OSError("no engine")

        with pytest.raises(RecognitionError):
            await TextRecognizer(make_engine=broken).recognize(binarized)

    @pytest.mark.asyncio
    async def test_region_outside_frame_raises(self, binarized, fake_engine):
        recognizer = TextRecognizer(make_engine=lambda: fake_engine)
        with pytest.raises(RecognitionError):
            await recognizer.recognize(binarized, region_of_interest=PixelBox(500, 500, 600, 600))

    @pytest.mark.asyncio
    async def test_cancel_mid_flight(self, binarized):
        release = threading.Event()
        engine = FakeEngine(block=release)
        recognizer = TextRecognizer(make_engine=lambda: engine)
        token = CancellationToken("test")

        task = asyncio.ensure_future(recognizer.recognize(binarized, cancel=token))
        try:
            await asyncio.sleep(0.05)
            token.cancel()
            with pytest.raises(Cancelled):
                await asyncio.wait_for(task, timeout=1)
        finally:
            release.set()

        # The worker still finishes and disposes of its engine.
        for _ in range(100):
            if engine.closed:
                break
            await asyncio.sleep(0.01)
        assert engine.closed


class TestEngineFactory:
    def test_known_engines(self):
        assert isinstance(engine_factory("tesseract")(), TesseractEngine)
        assert isinstance(engine_factory("EasyOCR")(), EasyOcrEngine)

    def test_languages_passed_through(self):
        engine = engine_factory("tesseract", ["eng", "deu"])()
        assert engine.lang == "eng+deu"

    def test_unknown_engine(self):
        with pytest.raises(ValueError):
            engine_factory("paddle")


class TestTesseractEngine:
    """Test suite for the pytesseract adapter."""

    @patch("pytesseract.get_tesseract_version", return_value="5.3.0")
    def test_load_builds_config(self, _version):
        engine = TesseractEngine()
        engine.load()

        assert "--psm 6" in engine.config
        assert "--oem 1" in engine.config
        assert f"tessedit_char_whitelist={CHAR_WHITELIST}" in engine.config
        assert "preserve_interword_spaces=1" in engine.config

    @patch("pytesseract.image_to_data")
    @patch("pytesseract.get_tesseract_version", return_value="5.3.0")
    def test_read_groups_lines_and_boxes(self, _version, image_to_data):
        image_to_data.return_value = {
            "text": ["", "Total", "$12.50", "", "3"],
            "left": [0, 2, 40, 0, 5],
            "top": [0, 3, 3, 0, 30],
            "width": [100, 30, 25, 100, 6],
            "height": [50, 10, 10, 50, 9],
            "conf": [-1, 91.0, 88.5, -1, 70.0],
            "block_num": [1, 1, 1, 1, 1],
            "par_num": [1, 1, 1, 1, 1],
            "line_num": [0, 1, 1, 0, 2],
        }
        engine = TesseractEngine()
        engine.load()
        text, tokens = engine.read(np.zeros((50, 100), dtype=np.uint8))

        assert text == "Total $12.50\n3"
        assert [t.text for t in tokens] == ["Total", "$12.50", "3"]
        assert tokens[1].box == PixelBox(40, 3, 65, 13)
        assert tokens[1].confidence == 88.5

    def test_read_before_load(self):
        with pytest.raises(RecognitionError):
            TesseractEngine().read(np.zeros((5, 5), dtype=np.uint8))


class TestEasyOcrEngine:
    """Test suite for the EasyOCR adapter, with the easyocr module mocked."""

    def test_load_read_close(self):
        fake_easyocr = MagicMock()
        reader = fake_easyocr.Reader.return_value
        reader.readtext.return_value = [
            ([[10, 5], [60, 5], [60, 20], [10, 20]], "$9.99", 0.93),
            ([[70, 5], [80, 5], [80, 20], [70, 20]], " ", 0.2),
        ]

        with patch.dict(sys.modules, {"easyocr": fake_easyocr}):
            engine = EasyOcrEngine()
            engine.load()
            text, tokens = engine.read(np.zeros((30, 100), dtype=np.uint8))
            engine.close()

        fake_easyocr.Reader.assert_called_once_with(["en"], gpu=False)
        assert reader.readtext.call_args.kwargs["allowlist"] == CHAR_WHITELIST
        assert text == "$9.99"
        assert tokens[0].box == PixelBox(10, 5, 60, 20)
        assert engine.reader is None
