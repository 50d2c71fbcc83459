from rest_framework import serializers

from apps.utils.validators import validate_phone
from .models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    phone = serializers.CharField(max_length=32, allow_blank=True, required=False, validators=[validate_phone])

    class Meta:
        model = Customer
        fields = [
            "id",
            "business_name",
            "contact_name",
            "email",
            "phone",
            "address",
            "state",
            "postcode",
            "country",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class CustomerProvisionSerializer(serializers.Serializer):
    email = serializers.EmailField()
    business_name = serializers.CharField(max_length=255)
    contact_name = serializers.CharField(max_length=255, allow_blank=True, required=False, default="")
    phone = serializers.CharField(max_length=32, allow_blank=True, required=False, default="", validators=[validate_phone])
    address = serializers.CharField(allow_blank=True, required=False, default="")
    state = serializers.CharField(max_length=100, allow_blank=True, required=False, default="")
    postcode = serializers.CharField(max_length=20, allow_blank=True, required=False, default="")
    country = serializers.CharField(max_length=100, allow_blank=True, required=False, default="")
