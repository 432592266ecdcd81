"""
Unit tests for ro_calc/helpers.py functions.
"""

import math

import pytest
import numpy as np
from ro_calc.helpers import (
    coerce_float,
    coerce_int,
    clamp,
    safe_divide,
    format_array_notation,
    check_mass_balance,
    convert_numpy_types
)


class TestCoercion:
    """Tests for best-effort numeric coercion."""

    @pytest.mark.unit
    @pytest.mark.parametrize("value,expected", [
        (12.5, 12.5),
        ("12.5", 12.5),
        (3, 3.0),
        (None, 7.0),
        ("", 7.0),
        ("abc", 7.0),
        (True, 7.0),
        (float('nan'), 7.0),
        (float('inf'), 7.0),
        ([1, 2], 7.0),
    ])
    def test_coerce_float(self, value, expected):
        """Test that malformed values fall back to the default."""
        assert coerce_float(value, 7.0) == expected

    @pytest.mark.unit
    def test_coerce_int_truncates(self):
        assert coerce_int("6.9") == 6
        assert coerce_int(None, 7) == 7

    @pytest.mark.unit
    def test_coerce_int_minimum(self):
        assert coerce_int(-3, 1, minimum=0) == 0


class TestArithmetic:
    """Tests for clamp and safe_divide."""

    @pytest.mark.unit
    def test_clamp_returns_native_float(self):
        result = clamp(np.float64(150.0), 1.0, 99.0)
        assert result == 99.0
        assert type(result) is float

    @pytest.mark.unit
    def test_clamp_inside_range(self):
        assert clamp(50.0, 1.0, 99.0) == 50.0

    @pytest.mark.unit
    def test_safe_divide(self):
        assert safe_divide(10.0, 4.0) == 2.5
        assert safe_divide(10.0, 0) == 0.0
        assert safe_divide(10.0, -1, default=-1.0) == -1.0


class TestFormatting:
    """Tests for formatting functions."""

    @pytest.mark.unit
    @pytest.mark.parametrize("vessel_counts,expected", [
        ([10], "10"),
        ([10, 5], "10:5"),
        ([10, 5, 3], "10:5:3"),
        ([], ""),
    ])
    def test_format_array_notation(self, vessel_counts, expected):
        """Test array notation formatting."""
        assert format_array_notation(vessel_counts) == expected


class TestMassBalance:
    """Tests for mass balance checking."""

    @pytest.mark.unit
    def test_perfect_mass_balance(self):
        """Test perfect mass balance."""
        is_balanced, error = check_mass_balance(100, 75, 25)
        assert is_balanced is True
        assert error == 0

    @pytest.mark.unit
    def test_rounding_noise_is_balanced(self):
        feed = 22.71247
        permeate = feed * 0.5
        is_balanced, error = check_mass_balance(feed, permeate, feed - permeate)
        assert is_balanced is True
        assert error < 1e-9

    @pytest.mark.unit
    def test_mass_balance_violation(self):
        """Test mass balance violation detection."""
        is_balanced, error = check_mass_balance(100, 75, 20)
        assert is_balanced is False
        assert error == pytest.approx(5)


class TestNumpyConversion:
    """Tests for numpy type conversion."""

    @pytest.mark.unit
    def test_convert_numpy_scalars(self):
        """Test conversion of numpy scalar types."""
        assert convert_numpy_types(np.float64(3.14)) == 3.14
        assert isinstance(convert_numpy_types(np.float64(3.14)), float)
        assert convert_numpy_types(np.int32(42)) == 42
        assert isinstance(convert_numpy_types(np.int32(42)), int)
        assert convert_numpy_types(np.bool_(True)) is True

    @pytest.mark.unit
    def test_convert_nested_structures(self):
        """Test conversion of nested structures."""
        data = {
            'flux': np.float64(15.5),
            'stages': [np.int64(6), np.int64(3)],
            'maxima': np.array([1.0, 2.0]),
            'note': 'ok'
        }

        converted = convert_numpy_types(data)

        assert converted == {'flux': 15.5, 'stages': [6, 3], 'maxima': [1.0, 2.0], 'note': 'ok'}
        assert not math.isnan(converted['flux'])
