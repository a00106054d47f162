"""
Application Serializers
"""
from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from .models import Application


class ApplicationSerializer(serializers.ModelSerializer):
    """Read representation (without the parent announcement body)."""

    announcement_id = serializers.UUIDField(read_only=True)
    applicant = UserSummarySerializer(read_only=True)

    class Meta:
        model = Application
        fields = [
            'id', 'announcement_id', 'applicant', 'count', 'delivery_dates', 'notes',
            'status', 'decided_at', 'closed_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class MyApplicationSerializer(ApplicationSerializer):
    """Applicant's view: includes a short summary of the announcement."""

    announcement_summary = serializers.SerializerMethodField()
    announcement_status = serializers.CharField(source='announcement.status', read_only=True)

    class Meta(ApplicationSerializer.Meta):
        fields = ApplicationSerializer.Meta.fields + ['announcement_summary', 'announcement_status']
        read_only_fields = fields

    def get_announcement_summary(self, obj):
        return obj.announcement.summary_text()


class ApplicationTermsSerializer(serializers.Serializer):
    """
    count / delivery_dates / notes as sent by the client.

    Emptiness, past dates and the goods-only count rule are checked by
    ApplicationLifecycleService so they report through the lifecycle
    error format.
    """

    count = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    delivery_dates = serializers.ListField(
        child=serializers.DateField(input_formats=['%Y-%m-%d']),
        required=False,
        allow_empty=True
    )
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, allow_null=True)


class ApplicationCreateSerializer(ApplicationTermsSerializer):
    announcement_id = serializers.UUIDField()
