"""
Vector Codec Tests
==================
"""

import numpy as np
import pytest

from openflowmap.field.codec import decode, decode_array, encode, encode_array


class TestEncode:
    """Tests for direction -> color encoding."""

    def test_center_is_neutral_gray(self):
        """A zero direction encodes to mid-range R/G."""
        np.testing.assert_array_equal(encode((0.0, 0.0)), [0.5, 0.5, 0.0, 1.0])

    def test_blue_and_alpha_fixed(self):
        """B is always 0 and A is always 1."""
        color = encode((0.3, -0.2))
        assert color[2] == 0.0
        assert color[3] == 1.0

    def test_out_of_range_saturates(self):
        """Components beyond +/-0.5 clamp to the channel limits."""
        np.testing.assert_array_equal(encode((2.0, -3.0)), [1.0, 0.0, 0.0, 1.0])


class TestRoundTrip:
    """Tests for decode(encode(d))."""

    @pytest.mark.parametrize(
        "direction",
        [(0.0, 0.0), (-0.5, 0.5), (0.25, -0.1), (0.499, -0.499)],
    )
    def test_representable_directions_survive(self, direction):
        """Directions inside [-0.5, 0.5] come back unchanged."""
        np.testing.assert_allclose(decode(encode(direction)), direction, atol=1e-12)

    def test_unrepresentable_directions_clamp(self):
        """Directions outside the range come back clamped."""
        np.testing.assert_allclose(decode(encode((0.9, -1.4))), (0.5, -0.5))

    def test_decode_has_no_normalization(self):
        """Decoding is a plain offset."""
        np.testing.assert_allclose(decode((0.75, 0.5, 0.0, 1.0)), (0.25, 0.0))


class TestArrayForms:
    """Tests for whole-array encoding."""

    def test_encode_array_shape(self):
        """Trailing axis 2 becomes trailing axis 4."""
        colors = encode_array(np.zeros((8, 8, 2)))
        assert colors.shape == (8, 8, 4)
        assert np.all(colors[..., 3] == 1.0)

    def test_decode_array_accepts_rgb(self):
        """Decoding only needs R and G."""
        directions = decode_array(np.full((3, 3), 0.5))
        assert directions.shape == (3, 2)
        assert np.all(directions == 0.0)

    def test_encode_array_rejects_bad_shape(self):
        """Directions must have two components."""
        with pytest.raises(ValueError):
            encode_array(np.zeros((4, 3)))
