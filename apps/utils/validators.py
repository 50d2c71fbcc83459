import re
from rest_framework import serializers

PHONE_STRIP_RE = re.compile(r"[\s\-().]")


def validate_phone(value):
    """
    Accepts local and international formats ("555-0123", "+61 2 9999 9999").
    Separators are ignored; 6-15 digits with an optional leading '+'.
    """
    digits = PHONE_STRIP_RE.sub("", str(value))
    if not re.match(r"^\+?\d{6,15}$", digits):
        raise serializers.ValidationError("Invalid phone number format.")
    return value
