"""
Serializers for TireOrder.

No business logic in serializers - validation only.
"""

from rest_framework import serializers

from apps.tire_orders.models import TireOrder


class TireOrderSerializer(serializers.ModelSerializer):
    id = serializers.UUIDField(read_only=True)
    requestId = serializers.UUIDField(source="request_id", read_only=True)
    vendorName = serializers.CharField(source="vendor_name")
    vendorEmail = serializers.CharField(source="vendor_email")
    vehicleNo = serializers.CharField(source="vehicle_no")
    tireBrand = serializers.CharField(source="tire_brand")
    tireSize = serializers.CharField(source="tire_size")
    userEmail = serializers.CharField(source="user_email")
    deliveryAddress = serializers.CharField(source="delivery_address")
    rejectionReason = serializers.CharField(source="rejection_reason", allow_null=True)
    confirmedAt = serializers.DateTimeField(source="confirmed_at")
    rejectedAt = serializers.DateTimeField(source="rejected_at")
    createdBy = serializers.UUIDField(source="created_by_id", allow_null=True)
    createdAt = serializers.DateTimeField(source="created_at")
    updatedAt = serializers.DateTimeField(source="updated_at")

    class Meta:
        model = TireOrder
        fields = [
            "id",
            "requestId",
            "vendorName",
            "vendorEmail",
            "vehicleNo",
            "tireBrand",
            "tireSize",
            "quantity",
            "userEmail",
            "deliveryAddress",
            "notes",
            "status",
            "rejectionReason",
            "confirmedAt",
            "rejectedAt",
            "createdBy",
            "createdAt",
            "updatedAt",
            "version",
        ]
        read_only_fields = fields


class TireOrderWriteSerializer(serializers.Serializer):
    """Editable order fields; requestId is required on create only."""

    requestId = serializers.UUIDField(source="request_id", required=False)
    vendorName = serializers.CharField(
        source="vendor_name", max_length=255, required=False, allow_blank=True
    )
    vendorEmail = serializers.EmailField(
        source="vendor_email", required=False, allow_blank=True
    )
    tireBrand = serializers.CharField(
        source="tire_brand", max_length=100, required=False, allow_blank=True
    )
    tireSize = serializers.CharField(
        source="tire_size", max_length=50, required=False, allow_blank=True
    )
    quantity = serializers.IntegerField(min_value=1, max_value=50, required=False)
    deliveryAddress = serializers.CharField(
        source="delivery_address", required=False, allow_blank=True
    )
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if self.context.get("creating") and not attrs.get("request_id"):
            raise serializers.ValidationError({"requestId": "This field is required."})
        return attrs


class RejectOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)
