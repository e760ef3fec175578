"""Tests for the encoded polyline codec."""

import pytest

from geo.polyline import decode_polyline, encode_polyline

# Reference sample from the polyline algorithm documentation (precision 5)
SAMPLE = '_p~iF~ps|U_ulLnnqC_mqNvxq`@'
SAMPLE_POINTS = [(38.5, -120.2), (40.7, -120.95), (43.252, -126.453)]


class TestDecodePolyline:
    """Tests for decode_polyline."""

    def test_reference_sample(self):
        assert decode_polyline(SAMPLE, precision=5) == SAMPLE_POINTS

    def test_empty(self):
        assert decode_polyline('') == []

    def test_truncated_raises(self):
        with pytest.raises(ValueError, match='Truncated'):
            decode_polyline(SAMPLE[:-1], precision=5)

    def test_default_precision_is_six(self):
        encoded = encode_polyline([(52.123456, 13.654321)], precision=6)
        assert decode_polyline(encoded) == [(52.123456, 13.654321)]


class TestEncodePolyline:
    """Tests for encode_polyline."""

    def test_reference_sample(self):
        assert encode_polyline(SAMPLE_POINTS, precision=5) == SAMPLE

    def test_empty(self):
        assert encode_polyline([]) == ''
