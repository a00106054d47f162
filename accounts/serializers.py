from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for user details.
    """
    role_display = serializers.CharField(source='get_role_display', read_only=True)

    class Meta:
        model = User
        fields = (
            'id', 'username', 'full_name', 'phone', 'role', 'role_display',
            'region', 'village', 'is_verified', 'is_locked', 'account_status',
            'date_joined', 'last_active_at'
        )
        read_only_fields = (
            'id', 'username', 'role', 'role_display', 'is_verified', 'is_locked',
            'account_status', 'date_joined', 'last_active_at'
        )

    def validate(self, attrs):
        region = attrs.get('region', getattr(self.instance, 'region', None))
        village = attrs.get('village', getattr(self.instance, 'village', None))
        if village and village.region_id != getattr(region, 'id', None):
            raise serializers.ValidationError(
                {'village': 'Village does not belong to the selected region'}
            )
        return attrs


class UserSummarySerializer(serializers.ModelSerializer):
    """Compact owner/applicant representation embedded in other payloads."""

    class Meta:
        model = User
        fields = ('id', 'full_name', 'phone', 'role')


class MarketplaceTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    JWT token serializer that includes the user profile.
    """
    def validate(self, attrs):
        data = super().validate(attrs)

        data['user'] = {
            'id': str(self.user.id),
            'username': self.user.username,
            'full_name': self.user.get_display_name(),
            'phone': str(self.user.phone),
            'role': self.user.role,
            'is_verified': self.user.is_verified,
        }

        self.user.last_active_at = timezone.now()
        self.user.save(update_fields=['last_active_at'])

        return data
