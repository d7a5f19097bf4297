"""
Tests for Rotation Sink and Controlled View
============================================
"""

import json
import socket
import pytest
import numpy as np
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gesture_look.control.sink import IndicatorState, RotationSink, StatusIndicator
from gesture_look.control.smoother import RotationState
from gesture_look.control.view import (
    ChannelConfig,
    ImageView,
    ViewChannel,
    ViewConfig,
    ViewTransform,
    ease_out,
)


def make_view(channel=None, transition_ms=100.0) -> ImageView:
    image = np.full((120, 160, 3), 200, dtype=np.uint8)
    return ImageView(ViewConfig(width=160, height=120, transition_ms=transition_ms), image=image, channel=channel)


class TestViewTransform:
    """Test suite for ViewTransform."""

    def test_css_equivalent(self):
        t = ViewTransform(rotation_x=1.5, rotation_y=-2.0)

        assert t.to_css() == "perspective(1000px) rotateX(1.5deg) rotateY(-2.0deg)"

    def test_zero_rotation_is_identity(self):
        h = ViewTransform(0.0, 0.0).homography(160, 120)

        assert np.allclose(h / h[2, 2], np.eye(3), atol=1e-6)

    def test_rotation_changes_geometry(self):
        h = ViewTransform(0.0, 10.0).homography(160, 120)

        assert not np.allclose(h / h[2, 2], np.eye(3), atol=1e-3)

    def test_ease_out(self):
        assert ease_out(0.0) == 0.0
        assert ease_out(1.0) == 1.0
        assert ease_out(2.0) == 1.0
        assert 0.5 < ease_out(0.5) < 1.0


class TestImageView:
    """Test suite for ImageView."""

    def test_transition_eases_to_target(self):
        view = make_view()

        view.set_transform(ViewTransform(10.0, -10.0), now=0.0)

        assert view.displayed_rotation(now=0.0) == (0.0, 0.0)
        mid_x, mid_y = view.displayed_rotation(now=0.05)
        assert 0.0 < mid_x < 10.0
        assert -10.0 < mid_y < 0.0
        assert view.displayed_rotation(now=0.1) == pytest.approx((10.0, -10.0))

    def test_transition_starts_from_displayed(self):
        view = make_view()
        view.set_transform(ViewTransform(10.0, 0.0), now=0.0)

        view.set_transform(ViewTransform(0.0, 0.0), now=1.0)

        assert view.displayed_rotation(now=1.0) == pytest.approx((10.0, 0.0))

    def test_no_transition(self):
        view = make_view(transition_ms=0)

        view.set_transform(ViewTransform(4.0, 2.0), now=0.0)

        assert view.displayed_rotation(now=0.0) == pytest.approx((4.0, 2.0))

    def test_cleared_transform_renders_original(self):
        view = make_view()
        view.set_transform(ViewTransform(5.0, 5.0), now=0.0)

        view.set_transform(None)

        assert view.transform is None
        assert np.array_equal(view.render(), view.image)

    def test_render_keeps_size(self):
        view = make_view()
        view.set_transform(ViewTransform(8.0, 12.0), now=0.0)

        rendered = view.render(now=1.0)

        assert rendered.shape == view.image.shape

    def test_placeholder_image(self):
        view = ImageView(ViewConfig(width=200, height=100))

        assert view.image.shape == (100, 200, 3)

    def test_post_without_channel(self):
        assert make_view().post_message({"type": "handControl"}) is False


class TestViewChannel:
    """Test suite for the best-effort UDP channel."""

    def test_delivers_json(self):
        receiver = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        receiver.bind(("127.0.0.1", 0))
        receiver.settimeout(2.0)
        port = receiver.getsockname()[1]
        channel = ViewChannel(ChannelConfig(enabled=True, host="127.0.0.1", port=port))
        try:
            assert channel.post({"type": "handControl", "rotationX": 1.0, "rotationY": 2.0})
            data, _ = receiver.recvfrom(4096)
        finally:
            channel.close()
            receiver.close()

        assert json.loads(data) == {"type": "handControl", "rotationX": 1.0, "rotationY": 2.0}

    def test_send_failure_is_swallowed(self):
        with patch("gesture_look.control.view.socket.socket") as mock_socket:
            mock_socket.return_value.sendto.side_effect = OSError("blocked")
            channel = ViewChannel(ChannelConfig(enabled=True))

            assert channel.post({"type": "handControl"}) is False
            assert channel.failures == 1


class TestStatusIndicator:
    """Test suite for StatusIndicator."""

    def test_states(self):
        indicator = StatusIndicator()
        assert not indicator.visible
        assert indicator.color is None

        indicator.show_detected()
        assert indicator.state is IndicatorState.DETECTED
        assert indicator.color == (0, 255, 0)

        indicator.show_searching()
        assert indicator.text == "Searching for hand..."

        indicator.hide()
        assert not indicator.visible


class TestRotationSink:
    """Test suite for RotationSink."""

    @pytest.fixture
    def channel(self):
        channel = MagicMock()
        channel.post.return_value = True
        return channel

    @pytest.fixture
    def sink(self, channel):
        return RotationSink(make_view(channel=channel))

    def test_activate_shows_searching(self, sink):
        sink.activate()

        assert sink.indicator.state is IndicatorState.SEARCHING

    def test_apply_detected(self, sink, channel):
        sink.apply(RotationState(1.5, -2.5), detected=True)

        assert sink.view.transform.rotation_x == 1.5
        assert sink.view.transform.rotation_y == -2.5
        assert sink.view.transform.perspective == 1000.0
        assert sink.indicator.state is IndicatorState.DETECTED
        channel.post.assert_called_once_with({"type": "handControl", "rotationX": 1.5, "rotationY": -2.5})

    def test_apply_searching(self, sink, channel):
        sink.apply(RotationState(0.5, 0.5), detected=False)

        assert sink.indicator.state is IndicatorState.SEARCHING
        assert sink.view.transform is not None
        channel.post.assert_not_called()

    def test_failed_post_is_not_fatal(self):
        with patch("gesture_look.control.view.socket.socket") as mock_socket:
            mock_socket.return_value.sendto.side_effect = OSError("blocked")
            sink = RotationSink(make_view(channel=ViewChannel(ChannelConfig(enabled=True))))

            sink.apply(RotationState(3.0, 3.0), detected=True)

        assert sink.indicator.state is IndicatorState.DETECTED
        assert sink.last_state == RotationState(3.0, 3.0)

    def test_reset(self, sink):
        sink.apply(RotationState(1.0, 1.0), detected=True)

        sink.reset()

        assert sink.view.transform is None
        assert not sink.indicator.visible
        assert sink.last_state is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
