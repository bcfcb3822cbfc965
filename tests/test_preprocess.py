import pytest
import numpy as np
from PIL import Image
import tempfile
import os

from triklops.preprocess import (
    ReferenceImageError, resize_with_padding, resize_exact,
    load_reference_image, check_reference
)


class TestPreprocessing:
    """Test cases for reference image preprocessing."""

    def create_test_image(self, size=(100, 150), color=(255, 0, 0)):
        """Create a test image."""
        return Image.new('RGB', size, color)

    def test_resize_with_padding(self):
        """Test resizing with aspect ratio preservation."""
        # Test landscape image
        img = self.create_test_image(size=(200, 100))
        resized = resize_with_padding(img, 256, fill_color=(255, 255, 255))

        assert resized.size == (256, 256)

        # Check that padding was added (top and bottom should be white)
        img_array = np.array(resized)
        assert np.all(img_array[0, :] == [255, 255, 255])
        assert np.all(img_array[-1, :] == [255, 255, 255])

        # Test portrait image
        img = self.create_test_image(size=(100, 200))
        resized = resize_with_padding(img, 256, fill_color=(0, 0, 0))

        assert resized.size == (256, 256)

        # Check that padding was added (left and right should be black)
        img_array = np.array(resized)
        assert np.all(img_array[:, 0] == [0, 0, 0])
        assert np.all(img_array[:, -1] == [0, 0, 0])

    def test_resize_exact(self):
        img = self.create_test_image(size=(120, 90), color=(10, 200, 30))
        resized = resize_exact(img, 64)
        assert resized.size == (64, 64)
        assert np.all(np.array(resized)[32, 32] == [10, 200, 30])

    def test_resize_exact_warns_on_extreme_aspect(self):
        img = self.create_test_image(size=(300, 50))
        with pytest.warns(UserWarning, match='resize_mode=pad'):
            resize_exact(img, 32)

    def test_load_reference_stretch(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'ref.png')
            self.create_test_image(size=(50, 40), color=(0, 128, 255)).save(path)

            reference = load_reference_image(path, 32)
            assert reference.shape == (32, 32, 3)
            assert reference.dtype == np.float64
            assert np.all(reference[16, 16] == [0.0, 128.0, 255.0])

    def test_load_reference_pad(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'ref.png')
            self.create_test_image(size=(80, 40), color=(255, 0, 0)).save(path)

            reference = load_reference_image(path, 32, resize_mode='pad', pad_color=(0, 0, 255))
            assert reference.shape == (32, 32, 3)
            assert np.all(reference[0, 0] == [0.0, 0.0, 255.0])
            assert np.all(reference[16, 16] == [255.0, 0.0, 0.0])

    def test_load_reference_converts_mode(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'gray.png')
            Image.new('L', (16, 16), 100).save(path)
            reference = load_reference_image(path, 16)
            assert reference.shape == (16, 16, 3)
            assert np.all(reference == 100.0)

    def test_missing_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with pytest.raises(ReferenceImageError, match='Cannot load reference image'):
                load_reference_image(os.path.join(tmpdir, 'nope.png'), 32)

    def test_not_an_image(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'notes.png')
            with open(path, 'w') as f:
                f.write('not an image')
            with pytest.raises(ReferenceImageError):
                load_reference_image(path, 32)

    def test_unknown_resize_mode(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'ref.png')
            self.create_test_image().save(path)
            with pytest.raises(ValueError):
                load_reference_image(path, 32, resize_mode='crop')

    def test_check_reference(self):
        reference = np.zeros((8, 8, 3))
        assert check_reference(reference, 8) is not None

        with pytest.raises(ReferenceImageError):
            check_reference(np.zeros((8, 8, 3)), 16)
        with pytest.raises(ReferenceImageError):
            check_reference(np.zeros((8, 8)), 8)
        with pytest.raises(ReferenceImageError):
            check_reference(np.full((8, 8, 3), 300.0), 8)
