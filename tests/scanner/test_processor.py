"""
Unit tests for the Scanner FrameProcessor.

Uses a scripted fake decoder so every pipeline branch can be driven
without depending on a real QR symbol reader.
"""

import cv2
import numpy as np
import pytest

from src.common.types import CornerSet
from src.scanner.errors import DegenerateCornersError
from src.scanner.processor import FrameProcessor, process_frame
from src.scanner.types import (
    DecodeMode,
    DecodePass,
    DecodeResult,
    NotFoundReason,
    OutcomeStatus,
)


class FakeDecoder:
    """Returns scripted results in call order and records every call."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def decode(self, raster, mode):
        self.calls.append((mode, raster.shape))
        if not self.results:
            return None
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class TestProcessorInit:
    """Test suite for FrameProcessor initialization."""

    def test_init_with_default_config(self):
        processor = FrameProcessor(decoder=FakeDecoder())

        assert processor.config is not None
        assert processor.config.matcher.min_candidates == 3

    def test_init_with_custom_config(self, scanner_config):
        processor = FrameProcessor(decoder=FakeDecoder(), config=scanner_config)

        assert processor.config is scanner_config

    def test_default_decoder(self, scanner_config):
        processor = FrameProcessor(config=scanner_config)

        assert processor.decoder is not None


class TestFrameProcessing:
    """Test suite for process_frame branches."""

    def test_direct_decode_short_circuits(
        self, blank_frame, scanner_config, monkeypatch
    ):
        """Test that a direct hit skips binarization entirely."""

        def fail_binarize(*args, **kwargs):
            raise AssertionError("binarize must not run after a direct decode")

        monkeypatch.setattr("src.scanner.processor.binarize", fail_binarize)
        location = CornerSet.from_numpy(
            np.array([[10, 10], [90, 10], [90, 90], [10, 90]])
        )
        decoder = FakeDecoder(DecodeResult(payload="hello", location=location))
        processor = FrameProcessor(decoder=decoder, config=scanner_config)

        outcome = processor.process_frame(blank_frame)

        assert outcome.status == OutcomeStatus.FOUND
        assert outcome.payload == "hello"
        assert outcome.decode_pass == DecodePass.DIRECT
        assert outcome.corners == location
        assert decoder.calls == [(DecodeMode.DONT_INVERT, blank_frame.shape)]

    def test_blank_frame_not_found(self, blank_frame, scanner_config, monkeypatch):
        """Test that no candidates stop the pipeline before rectification."""

        def fail_rectify(*args, **kwargs):
            raise AssertionError("rectify must not run without a triple")

        monkeypatch.setattr("src.scanner.processor.rectify", fail_rectify)
        decoder = FakeDecoder()
        processor = FrameProcessor(decoder=decoder, config=scanner_config)

        outcome = processor.process_frame(blank_frame)

        assert outcome.status == OutcomeStatus.NOT_FOUND
        assert outcome.not_found_reason == NotFoundReason.NO_FINDER_PATTERNS
        assert outcome.candidate_count == 0
        assert outcome.corners is None
        assert len(decoder.calls) == 1

    def test_rectified_decode(self, make_code_frame, scanner_config):
        """Test the full path: locate, rectify, and decode the second pass."""
        frame, _ = make_code_frame()
        decoder = FakeDecoder(None, DecodeResult(payload="rectified"))
        processor = FrameProcessor(decoder=decoder, config=scanner_config)

        outcome = processor.process_frame(frame)

        assert outcome.status == OutcomeStatus.FOUND
        assert outcome.payload == "rectified"
        assert outcome.decode_pass == DecodePass.RECTIFIED
        assert outcome.candidate_count >= 3

        expected = [(135, 135), (275, 135), (275, 275), (135, 275)]
        for corner, (x, y) in zip(outcome.corners.as_list(), expected):
            assert corner.x == pytest.approx(x, abs=2)
            assert corner.y == pytest.approx(y, abs=2)

        assert [mode for mode, _ in decoder.calls] == [
            DecodeMode.DONT_INVERT,
            DecodeMode.ATTEMPT_BOTH,
        ]
        height, width, channels = decoder.calls[1][1]
        assert width == pytest.approx(140, abs=4)
        assert height == pytest.approx(140, abs=4)
        assert channels == 4

    def test_second_decode_fails_keeps_corners(self, make_code_frame, scanner_config):
        """Test that a located but unreadable code still reports its outline."""
        frame, _ = make_code_frame()
        processor = FrameProcessor(decoder=FakeDecoder(), config=scanner_config)

        outcome = processor.process_frame(frame)

        assert outcome.status == OutcomeStatus.NOT_FOUND
        assert outcome.not_found_reason == NotFoundReason.DECODE_FAILED
        assert outcome.corners is not None
        assert outcome.payload is None

    def test_no_valid_triple(self, make_code_frame, scanner_config, monkeypatch):
        frame, _ = make_code_frame()
        monkeypatch.setattr("src.scanner.processor.match_triple", lambda *a: None)
        processor = FrameProcessor(decoder=FakeDecoder(), config=scanner_config)

        outcome = processor.process_frame(frame)

        assert outcome.not_found_reason == NotFoundReason.NO_VALID_TRIPLE
        assert outcome.candidate_count >= 3

    def test_degenerate_corners(self, make_code_frame, scanner_config, monkeypatch):
        """Test that a corner set rejected by the rectifier is NOT_FOUND."""

        def degenerate(*args, **kwargs):
            raise DegenerateCornersError("Corner set too small")

        frame, _ = make_code_frame()
        monkeypatch.setattr("src.scanner.processor.rectify", degenerate)
        processor = FrameProcessor(decoder=FakeDecoder(), config=scanner_config)

        outcome = processor.process_frame(frame)

        assert outcome.status == OutcomeStatus.NOT_FOUND
        assert outcome.not_found_reason == NotFoundReason.DEGENERATE_CORNERS

    def test_malformed_frame_is_error(self, scanner_config):
        processor = FrameProcessor(decoder=FakeDecoder(), config=scanner_config)

        outcome = processor.process_frame(np.zeros((10, 10, 2), dtype=np.uint8))

        assert outcome.status == OutcomeStatus.ERROR
        assert outcome.error_message

    def test_decoder_exception_is_error(self, blank_frame, scanner_config):
        decoder = FakeDecoder(RuntimeError("decoder crashed"))
        processor = FrameProcessor(decoder=decoder, config=scanner_config)

        outcome = processor.process_frame(blank_frame)

        assert outcome.is_error()
        assert "decoder crashed" in outcome.error_message
        assert "Processing error" in outcome.get_message()

    @pytest.mark.parametrize(
        "results",
        [
            (DecodeResult(payload="direct"),),
            (None, DecodeResult(payload="rectified")),
            (),
            (RuntimeError("boom"),),
        ],
    )
    def test_arena_released_on_every_path(
        self, make_code_frame, scanner_config, results
    ):
        """Test that no tick intermediates survive process_frame."""
        frame, _ = make_code_frame()
        processor = FrameProcessor(decoder=FakeDecoder(*results), config=scanner_config)

        processor.process_frame(frame)

        assert processor.last_arena.released is True
        assert processor.last_arena.live_count == 0

    def test_processing_time_recorded(self, blank_frame, scanner_config):
        processor = FrameProcessor(decoder=FakeDecoder(), config=scanner_config)

        outcome = processor.process_frame(blank_frame)

        assert outcome.processing_time_ms > 0


class TestConvenienceFunction:
    """Test suite for module-level process_frame."""

    def test_process_frame_function(self, blank_frame, scanner_config):
        outcome = process_frame(
            blank_frame, decoder=FakeDecoder(), config=scanner_config
        )

        assert outcome.is_not_found()


@pytest.mark.skipif(
    not hasattr(cv2, "QRCodeEncoder"), reason="OpenCV build without QRCodeEncoder"
)
class TestEndToEnd:
    """Pipeline with the real OpenCV decoder."""

    def test_decodes_generated_code(self, scanner_config):
        symbol = cv2.QRCodeEncoder.create().encode("https://example.com/scan")
        symbol = cv2.resize(
            symbol, None, fx=8, fy=8, interpolation=cv2.INTER_NEAREST
        )
        symbol = cv2.copyMakeBorder(
            symbol, 60, 60, 60, 60, cv2.BORDER_CONSTANT, value=255
        )
        frame = cv2.cvtColor(symbol, cv2.COLOR_GRAY2RGBA)

        outcome = process_frame(frame, config=scanner_config)

        assert outcome.is_found()
        assert outcome.payload == "https://example.com/scan"
