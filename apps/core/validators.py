"""Upload validators."""
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _


def validate_image_file(value):
    """Validate image files (max 5MB, JPEG/PNG/GIF/WebP only)."""
    max_size = 5 * 1024 * 1024

    if value.size > max_size:
        raise ValidationError(
            _('File size must not exceed 5 MB. '
              'Current size: %(size).1f MB.'),
            params={'size': value.size / (1024 * 1024)},
        )

    allowed_types = ['image/jpeg', 'image/png', 'image/gif', 'image/webp']
    content_type = getattr(value, 'content_type', None)
    if content_type and content_type not in allowed_types:
        raise ValidationError(
            _('File type not allowed: %(type)s. '
              'Accepted types: JPEG, PNG, GIF, WebP.'),
            params={'type': content_type},
        )
