"""
Announcement Serializers

Input shaping only: types, formats and enum values. Business rules
(category-conditional fields, catalog/region checks, edit rights) live in
AnnouncementLifecycleService.
"""
from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from core.storage_service import get_image_store
from .models import Announcement, AnnouncementFavorite


class AnnouncementWriteSerializer(serializers.Serializer):
    """
    Create payload. Rent dates use YYYY-MM-DD and must be real calendar dates.
    Image files are sent separately as multipart 'uploads'.
    """

    type = serializers.ChoiceField(choices=Announcement.Type.choices)
    category = serializers.ChoiceField(choices=Announcement.Category.choices)
    group_id = serializers.IntegerField(min_value=1)
    item_id = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    description = serializers.CharField(
        max_length=2000,
        required=False,
        allow_blank=True,
        allow_null=True
    )

    count = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    daily_limit = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    unit = serializers.ChoiceField(choices=Announcement.Unit.choices, required=False, allow_null=True)

    date_from = serializers.DateField(input_formats=['%Y-%m-%d'], required=False, allow_null=True)
    date_to = serializers.DateField(input_formats=['%Y-%m-%d'], required=False, allow_null=True)
    min_area = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    expiry_date = serializers.DateField(input_formats=['%Y-%m-%d'], required=False)

    images = serializers.ListField(
        child=serializers.CharField(max_length=500),
        required=False,
        allow_empty=True,
        help_text="Existing storage keys to keep"
    )
    regions = serializers.ListField(child=serializers.IntegerField(min_value=1), required=False)
    villages = serializers.ListField(child=serializers.IntegerField(min_value=1), required=False)


class AnnouncementUpdateSerializer(AnnouncementWriteSerializer):
    """
    Partial update payload (use with partial=True).

    status is accepted only so the service can reject it with a message
    pointing at the dedicated transition endpoints.
    """

    status = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class AnnouncementSerializer(serializers.ModelSerializer):
    """Read representation."""

    owner = UserSummarySerializer(read_only=True)
    group_id = serializers.IntegerField(read_only=True)
    group_name = serializers.CharField(source='group.name_en', read_only=True)
    item_id = serializers.IntegerField(read_only=True)
    item_name = serializers.CharField(source='item.name_en', read_only=True)
    regions = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    villages = serializers.PrimaryKeyRelatedField(many=True, read_only=True)
    image_urls = serializers.SerializerMethodField()
    closed_by = serializers.UUIDField(source='closed_by_id', read_only=True)

    class Meta:
        model = Announcement
        fields = [
            'id', 'type', 'category', 'group_id', 'group_name', 'item_id', 'item_name',
            'price', 'description', 'status', 'owner',
            'count', 'daily_limit', 'available_quantity', 'unit',
            'date_from', 'date_to', 'min_area', 'expiry_date',
            'images', 'image_urls', 'regions', 'villages', 'views_count',
            'closed_by', 'cancellation_kind',
            'published_at', 'closed_at', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    def get_image_urls(self, obj):
        return get_image_store().resolve(obj.images)


class AppliedAnnouncementSerializer(AnnouncementSerializer):
    """Announcement plus the caller's own applications on it."""

    my_applications = serializers.SerializerMethodField()
    my_applications_count = serializers.SerializerMethodField()

    class Meta(AnnouncementSerializer.Meta):
        fields = AnnouncementSerializer.Meta.fields + ['my_applications', 'my_applications_count']
        read_only_fields = fields

    def _my_applications(self, obj):
        user = self.context['request'].user
        return [app for app in obj.applications.all() if app.applicant_id == user.id]

    def get_my_applications(self, obj):
        from applications.serializers import ApplicationSerializer
        return ApplicationSerializer(self._my_applications(obj), many=True).data

    def get_my_applications_count(self, obj):
        return len(self._my_applications(obj))


class FavoriteCreateSerializer(serializers.Serializer):
    announcement_id = serializers.UUIDField()


class FavoriteSerializer(serializers.ModelSerializer):
    announcement = AnnouncementSerializer(read_only=True)
    announcement_id = serializers.UUIDField(read_only=True)
    user_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = AnnouncementFavorite
        fields = ['id', 'announcement_id', 'user_id', 'created_at', 'announcement']
        read_only_fields = fields
