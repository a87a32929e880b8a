"""Tests for upload validators."""
import pytest
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile

from apps.core.validators import validate_image_file


def test_accepts_small_png():
    validate_image_file(SimpleUploadedFile('logo.png', b'\x89PNG' * 10, content_type='image/png'))


def test_rejects_large_file():
    upload = SimpleUploadedFile('logo.png', b'0' * (5 * 1024 * 1024 + 1), content_type='image/png')
    with pytest.raises(ValidationError, match='5 MB'):
        validate_image_file(upload)


def test_rejects_other_types():
    upload = SimpleUploadedFile('logo.svg', b'<svg/>', content_type='image/svg+xml')
    with pytest.raises(ValidationError, match='image/svg\\+xml'):
        validate_image_file(upload)
