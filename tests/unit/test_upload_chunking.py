"""Tests for fragment splitting."""
import pytest

from drivepy.core.upload.models import FRAGMENT_ALIGNMENT_BYTES
from drivepy.core.upload.strategies import AlignedFragmentStrategy

MIB = 1024 * 1024


class TestAlignedFragmentStrategy:
    """Test suite for AlignedFragmentStrategy."""

    @pytest.fixture
    def strategy(self):
        """4 MiB fragments on a 1 MiB alignment."""
        return AlignedFragmentStrategy(4 * MIB, alignment=MIB)

    def test_empty_source(self, strategy):
        assert strategy.calculate_fragments(0) == []

    def test_negative_length(self, strategy):
        with pytest.raises(ValueError):
            strategy.calculate_fragments(-1)

    def test_ten_mib_in_four_mib_fragments(self, strategy):
        headers = [r.to_header() for r in strategy.calculate_fragments(10 * MIB)]

        assert headers == [
            'bytes 0-4194303/10485760',
            'bytes 4194304-8388607/10485760',
            'bytes 8388608-10485759/10485760',
        ]

    def test_source_smaller_than_fragment(self, strategy):
        fragments = strategy.calculate_fragments(100)

        assert len(fragments) == 1
        assert fragments[0].to_header() == 'bytes 0-99/100'

    def test_exact_multiple(self, strategy):
        fragments = strategy.calculate_fragments(8 * MIB)

        assert len(fragments) == 2
        assert fragments[-1].bytes_in_range == 4 * MIB

    @pytest.mark.parametrize('total', [1, 327679, 327680, 327681, 10 * MIB + 7, 33 * FRAGMENT_ALIGNMENT_BYTES])
    @pytest.mark.parametrize('multiple', [1, 3, 32])
    def test_fragments_are_contiguous(self, total, multiple):
        strategy = AlignedFragmentStrategy(multiple * FRAGMENT_ALIGNMENT_BYTES)
        fragments = strategy.calculate_fragments(total)

        assert fragments[0].first_byte_index == 0
        assert fragments[-1].last_byte_index == total - 1
        for previous, current in zip(fragments, fragments[1:]):
            assert current.first_byte_index == previous.last_byte_index + 1
        assert sum(r.bytes_in_range for r in fragments) == total
        assert all(r.total_length_bytes == total for r in fragments)

    def test_default_alignment_is_320_kib(self):
        strategy = AlignedFragmentStrategy(FRAGMENT_ALIGNMENT_BYTES * 2)

        assert strategy.alignment == 320 * 1024

    @pytest.mark.parametrize('size,alignment', [
        (0, MIB),
        (-MIB, MIB),
        (MIB + 1, MIB),
        (4 * MIB, 0),
    ])
    def test_invalid_sizes(self, size, alignment):
        with pytest.raises(ValueError):
            AlignedFragmentStrategy(size, alignment=alignment)

    def test_four_mib_not_aligned_to_default(self):
        with pytest.raises(ValueError):
            AlignedFragmentStrategy(4 * MIB)
