"""
Serializers for TireRequest.

No business logic in serializers. Writes go through
apps.tire_requests.services, which validates the raw submitted fields.
"""

from rest_framework import serializers

from apps.tire_requests.models import TireRequest
from apps.tire_requests.photos import consolidate


class TireRequestSummarySerializer(serializers.ModelSerializer):
    """Dashboard row without photo payloads."""

    id = serializers.UUIDField(read_only=True)
    vehicleNo = serializers.CharField(source="vehicle_no")
    vehicleType = serializers.CharField(source="vehicle_type")
    vehicleBrand = serializers.CharField(source="vehicle_brand")
    vehicleModel = serializers.CharField(source="vehicle_model")
    userSection = serializers.CharField(source="user_section")
    replacementDate = serializers.DateField(source="replacement_date", allow_null=True)
    existingMake = serializers.CharField(source="existing_make")
    tireSize = serializers.CharField(source="tire_size")
    noOfTires = serializers.IntegerField(source="no_of_tires", allow_null=True)
    noOfTubes = serializers.IntegerField(source="no_of_tubes", allow_null=True)
    costCenter = serializers.CharField(source="cost_center")
    presentKm = serializers.CharField(source="present_km")
    previousKm = serializers.CharField(source="previous_km")
    wearIndicator = serializers.CharField(source="wear_indicator")
    wearPattern = serializers.CharField(source="wear_pattern")
    officerServiceNo = serializers.CharField(source="officer_service_no")
    rejectionReason = serializers.CharField(source="rejection_reason", allow_null=True)
    photoCount = serializers.SerializerMethodField()
    managerApprovedAt = serializers.DateTimeField(source="manager_approved_at")
    managerRejectedAt = serializers.DateTimeField(source="manager_rejected_at")
    ttoApprovedAt = serializers.DateTimeField(source="tto_approved_at")
    ttoRejectedAt = serializers.DateTimeField(source="tto_rejected_at")
    engineerApprovedAt = serializers.DateTimeField(source="engineer_approved_at")
    engineerRejectedAt = serializers.DateTimeField(source="engineer_rejected_at")
    submittedBy = serializers.UUIDField(
        source="submitted_by_id", read_only=True, allow_null=True
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = TireRequest
        fields = [
            "id",
            "status",
            "vehicleNo",
            "vehicleType",
            "vehicleBrand",
            "vehicleModel",
            "userSection",
            "replacementDate",
            "existingMake",
            "tireSize",
            "noOfTires",
            "noOfTubes",
            "costCenter",
            "presentKm",
            "previousKm",
            "wearIndicator",
            "wearPattern",
            "officerServiceNo",
            "email",
            "comments",
            "rejectionReason",
            "photoCount",
            "managerApprovedAt",
            "managerRejectedAt",
            "ttoApprovedAt",
            "ttoRejectedAt",
            "engineerApprovedAt",
            "engineerRejectedAt",
            "submittedBy",
            "createdAt",
            "updatedAt",
            "version",
        ]
        read_only_fields = fields

    def _photos(self, obj):
        return consolidate(obj.photo_urls, obj.legacy_photo_urls)

    def get_photoCount(self, obj):
        return len(self._photos(obj))


class TireRequestSerializer(TireRequestSummarySerializer):
    """
    Full request. Both photo keys carry the same consolidated list so
    older clients reading tirePhotoUrls keep working.
    """

    photoUrls = serializers.SerializerMethodField()
    tirePhotoUrls = serializers.SerializerMethodField()

    class Meta(TireRequestSummarySerializer.Meta):
        fields = TireRequestSummarySerializer.Meta.fields + ["photoUrls", "tirePhotoUrls"]
        read_only_fields = fields

    def get_photoUrls(self, obj):
        return self._photos(obj)

    def get_tirePhotoUrls(self, obj):
        return self._photos(obj)


class DecisionSerializer(serializers.Serializer):
    """Body of approve/reject endpoints."""

    reason = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=1000
    )
    rejectionReason = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=1000
    )

    def get_reason(self):
        data = self.validated_data
        return data.get("reason") or data.get("rejectionReason")
