"""
GPS Normalization
=================

EXIF stores a coordinate either as a plain decimal number or as a
degrees/minutes/seconds triple of rationals, with the hemisphere kept
in a separate reference tag:

    GPSLatitudeRef:  'N'
    GPSLatitude:     (48, 51, 30.24)    # 48° 51' 30.24"
    GPSLongitudeRef: 'E'
    GPSLongitude:    (2, 17, 40.2)

Converted to decimal degrees:

    decimal = degrees + minutes/60 + seconds/3600

No rounding or range checks are applied. A corrupt triple that yields
|lat| > 90 is stored as-is, but NaN or infinite results count as absent.
"""

import io
import logging
import math
from numbers import Real
from typing import Any, Optional, Tuple

from PIL import ExifTags, Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

# Tag IDs inside the GPS IFD
GPS_LAT_REF = 1  # 'N' or 'S'
GPS_LAT = 2
GPS_LON_REF = 3  # 'E' or 'W'
GPS_LON = 4

NEGATIVE_REFS = {"S", "W"}


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def normalize_gps(value: Any) -> Optional[float]:
    """
    Convert an EXIF location field to decimal degrees.

    Args:
        value: A decimal number, a ``[degrees, minutes, seconds]``
            sequence, or anything else.

    Returns:
        Decimal degrees, or ``None`` when the value is absent or has
        any other shape.

    Example:
        >>> normalize_gps([40, 30, 0])
        40.5
        >>> normalize_gps(2.2945)
        2.2945
        >>> normalize_gps([48, 51]) is None
        True
    """
    if value is None:
        return None
    if _is_number(value):
        decimal = float(value)
    elif isinstance(value, (list, tuple)) and len(value) == 3:
        if not all(_is_number(part) for part in value):
            return None
        degrees, minutes, seconds = (float(part) for part in value)
        decimal = degrees + minutes / 60 + seconds / 3600
    else:
        return None
    # A 0/0 rational (no fix) reads back as NaN
    if not math.isfinite(decimal):
        return None
    return decimal


def _hemisphere_sign(ref: Any) -> int:
    if isinstance(ref, bytes):
        ref = ref.decode("ascii", errors="ignore")
    if isinstance(ref, str) and ref.strip().upper() in NEGATIVE_REFS:
        return -1
    return 1


def read_exif_location(data: bytes) -> Tuple[Optional[float], Optional[float]]:
    """
    Read the GPS position embedded in image bytes.

    Pillow returns GPS components as ``IFDRational`` values, which are
    ``numbers.Rational`` and therefore accepted by :func:`normalize_gps`.

    Args:
        data: Raw image bytes.

    Returns:
        ``(lat, lng)``; either element is ``None`` when it is missing or
        malformed. Bytes that cannot be decoded yield ``(None, None)``.
    """
    try:
        with Image.open(io.BytesIO(data)) as image:
            gps_info = image.getexif().get_ifd(ExifTags.IFD.GPSInfo)
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        logger.warning(f"Failed to read EXIF data: {e}")
        return None, None

    if not gps_info:
        logger.debug("No GPS IFD found in image")
        return None, None

    lat = normalize_gps(gps_info.get(GPS_LAT))
    lng = normalize_gps(gps_info.get(GPS_LON))

    if lat is not None:
        lat *= _hemisphere_sign(gps_info.get(GPS_LAT_REF))
    if lng is not None:
        lng *= _hemisphere_sign(gps_info.get(GPS_LON_REF))

    return lat, lng
