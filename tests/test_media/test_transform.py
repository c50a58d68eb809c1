"""Tests for frame reconciliation (rescale + pixel format conversion)."""

import numpy as np
import pytest

from flipbook.core.contracts import TargetFormat
from flipbook.core.errors import TransformFailed
from flipbook.media.frame import RawFrame
from flipbook.media.transform import convert_format, get_conversion_context, reconcile


@pytest.fixture
def bgr_frame() -> RawFrame:
    rng = np.random.default_rng(42)
    return RawFrame(rng.integers(0, 255, (120, 160, 3), dtype=np.uint8), "bgr24")


class TestRawFrame:
    def test_geometry(self, bgr_frame):
        assert (bgr_frame.width, bgr_frame.height) == (160, 120)
        assert bgr_frame.strides == [160 * 3]

    def test_yuv420p_planes(self):
        frame = RawFrame(np.zeros((120 * 3 // 2, 160), dtype=np.uint8), "yuv420p")
        assert (frame.width, frame.height) == (160, 120)
        y, u, v = frame.planes
        assert y.shape == (120, 160)
        assert u.shape == v.shape == (60, 80)

    def test_from_array_infers_format(self):
        assert RawFrame.from_array(np.zeros((4, 4), np.uint8)).pix_fmt == "gray"
        assert RawFrame.from_array(np.zeros((4, 4, 3), np.uint8)).pix_fmt == "bgr24"
        assert RawFrame.from_array(np.zeros((4, 4, 4), np.uint8)).pix_fmt == "bgra"

    def test_channel_mismatch_rejected(self):
        with pytest.raises(ValueError):
            RawFrame(np.zeros((4, 4, 3), np.uint8), "gray")


class TestReconcile:
    def test_matching_frame_returned_unchanged(self, bgr_frame):
        target = TargetFormat(width=160, height=120, pix_fmt="bgr24")
        assert reconcile(bgr_frame, target) is bgr_frame

    def test_rescale(self, bgr_frame):
        out = reconcile(bgr_frame, TargetFormat(width=64, height=48, pix_fmt="bgr24"))
        assert (out.width, out.height, out.pix_fmt) == (64, 48, "bgr24")
        assert out.data.shape == (48, 64, 3)

    def test_rescale_and_convert_to_yuv(self, bgr_frame):
        out = reconcile(bgr_frame, TargetFormat(width=64, height=48, pix_fmt="yuv420p"))
        assert (out.width, out.height, out.pix_fmt) == (64, 48, "yuv420p")
        assert out.data.shape == (72, 64)

    def test_gray_to_bgr(self):
        gray = RawFrame(np.full((48, 64), 77, np.uint8), "gray")
        out = reconcile(gray, TargetFormat(width=64, height=48, pix_fmt="bgr24"))
        assert out.pix_fmt == "bgr24"
        assert np.all(out.data == 77)

    def test_idempotent(self, bgr_frame):
        target = TargetFormat(width=100, height=50, pix_fmt="bgr24")
        once = reconcile(bgr_frame, target)
        twice = reconcile(once, target)
        assert twice is once

    def test_deterministic(self, bgr_frame):
        target = TargetFormat(width=97, height=53, pix_fmt="bgr24")
        a = reconcile(bgr_frame, target)
        b = reconcile(bgr_frame, target)
        assert np.array_equal(a.data, b.data)

    def test_source_not_modified(self, bgr_frame):
        before = bgr_frame.data.copy()
        reconcile(bgr_frame, TargetFormat(width=32, height=24, pix_fmt="gray"))
        assert np.array_equal(bgr_frame.data, before)


class TestConversionContext:
    def test_odd_yuv_target_fails(self):
        with pytest.raises(TransformFailed):
            get_conversion_context(160, 120, "bgr24", 63, 47, "yuv420p")

    def test_unknown_format_fails(self):
        with pytest.raises(TransformFailed):
            get_conversion_context(16, 16, "nv12", 16, 16, "bgr24")

    def test_empty_geometry_fails(self):
        with pytest.raises(TransformFailed):
            get_conversion_context(0, 16, "bgr24", 16, 16, "bgr24")

    def test_context_rejects_other_geometry(self, bgr_frame):
        ctx = get_conversion_context(10, 10, "bgr24", 5, 5, "bgr24")
        with pytest.raises(TransformFailed):
            ctx.convert(bgr_frame)

    def test_routed_conversion(self):
        rgb = RawFrame(np.zeros((8, 8, 3), np.uint8), "rgb24")
        out = convert_format(rgb, "yuv420p")
        assert out.pix_fmt == "yuv420p"
        assert (out.width, out.height) == (8, 8)

    def test_convert_format_same_returns_input(self, bgr_frame):
        assert convert_format(bgr_frame, "bgr24") is bgr_frame
