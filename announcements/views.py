"""
Announcement Views

Thin HTTP layer over AnnouncementLifecycleService. Lifecycle errors are
DRF exceptions and propagate straight to the exception handler.
"""
from datetime import datetime

from django.db.models import Prefetch, Q
from rest_framework import generics, status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsMarketplaceAdmin
from applications.models import Application
from core.exceptions import NotFound, ValidationError
from .models import Announcement
from .serializers import (
    AnnouncementSerializer,
    AnnouncementUpdateSerializer,
    AnnouncementWriteSerializer,
    AppliedAnnouncementSerializer,
    FavoriteCreateSerializer,
    FavoriteSerializer,
)
from .services.announcement_lifecycle import get_announcement_service
from .services.expiry_sweeper import get_expiry_sweeper
from .services.favorites import get_favorites_service


def _base_queryset():
    return Announcement.objects.select_related('owner', 'group', 'item').prefetch_related(
        'regions', 'villages'
    )


def _parse_list_param(request, name):
    values = []
    for raw in request.query_params.getlist(name):
        values.extend(part.strip() for part in raw.split(',') if part.strip())
    return values


def _parse_date_param(request, name):
    value = request.query_params.get(name)
    if not value:
        return None
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f'{name} must be a date in YYYY-MM-DD format', field=name)


def _uploaded_images(request):
    return request.FILES.getlist('uploads') if hasattr(request, 'FILES') else []


class AnnouncementListCreateView(generics.ListCreateAPIView):
    """
    GET /api/announcements/
        Published announcements by other users.

        Query Parameters:
        - category: goods, rent, service (repeat or comma separate)
        - type: sell or buy
        - status: defaults to published
        - group_id: catalog category ids
        - region / village: location ids
        - price_from / price_to
        - created_from / created_to: YYYY-MM-DD
        - page: Page number (default: 1)

    POST /api/announcements/
        Create an announcement (verified farmers and companies).
        Image files go in multipart 'uploads'.
    """

    serializer_class = AnnouncementSerializer
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_queryset(self):
        queryset = _base_queryset()
        params = self.request.query_params

        status_param = params.get('status')
        if status_param:
            if status_param not in Announcement.Status.values:
                raise ValidationError(
                    f'Invalid status value: "{status_param}". '
                    f'Valid values are: {", ".join(Announcement.Status.values)}',
                    field='status',
                )
            queryset = queryset.filter(status=status_param)
        else:
            queryset = queryset.filter(status=Announcement.Status.PUBLISHED)

        categories = _parse_list_param(self.request, 'category')
        if categories:
            invalid = [c for c in categories if c not in Announcement.Category.values]
            if invalid:
                raise ValidationError(
                    f'Invalid category value: "{invalid[0]}". '
                    f'Valid values are: {", ".join(Announcement.Category.values)}',
                    field='category',
                )
            queryset = queryset.filter(category__in=categories)

        announcement_type = params.get('type')
        if announcement_type:
            queryset = queryset.filter(type=announcement_type)

        group_ids = _parse_list_param(self.request, 'group_id')
        if group_ids:
            queryset = queryset.filter(group_id__in=group_ids)

        regions = _parse_list_param(self.request, 'region')
        if regions:
            queryset = queryset.filter(regions__id__in=regions)

        villages = _parse_list_param(self.request, 'village')
        if villages:
            queryset = queryset.filter(villages__id__in=villages)

        price_from = params.get('price_from')
        if price_from:
            queryset = queryset.filter(price__gte=price_from)
        price_to = params.get('price_to')
        if price_to:
            queryset = queryset.filter(price__lte=price_to)

        created_from = _parse_date_param(self.request, 'created_from')
        if created_from:
            queryset = queryset.filter(created_at__date__gte=created_from)
        created_to = _parse_date_param(self.request, 'created_to')
        if created_to:
            queryset = queryset.filter(created_at__date__lte=created_to)

        return queryset.exclude(owner=self.request.user).distinct()

    def create(self, request, *args, **kwargs):
        serializer = AnnouncementWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        announcement = get_announcement_service().create(
            request.user,
            serializer.validated_data,
            uploaded_files=_uploaded_images(request),
        )

        if announcement.status == Announcement.Status.PENDING:
            message = 'Your Announcement was successfully submitted for verification'
        else:
            message = 'Your Announcement is published and ready to receive applications'

        return Response(
            {
                'message': message,
                'announcement': AnnouncementSerializer(announcement).data,
            },
            status=status.HTTP_201_CREATED
        )


class MyAnnouncementListView(generics.ListAPIView):
    """
    GET /api/announcements/me/

    The caller's announcements (soft-deleted ones excluded).
    Query Parameters: status, category
    """

    serializer_class = AnnouncementSerializer

    def get_queryset(self):
        queryset = _base_queryset().filter(owner=self.request.user).exclude(
            cancellation_kind=Announcement.CancellationKind.DELETED
        )
        status_param = self.request.query_params.get('status')
        if status_param:
            queryset = queryset.filter(status=status_param)
        category = self.request.query_params.get('category')
        if category:
            queryset = queryset.filter(category=category)
        return queryset


class AnnouncementSearchView(generics.ListAPIView):
    """
    GET /api/announcements/search/?q=<phrase>

    Text search over description and item/group names of published
    announcements by other users.
    """

    serializer_class = AnnouncementSerializer

    def get_queryset(self):
        queryset = _base_queryset().filter(status=Announcement.Status.PUBLISHED).exclude(
            owner=self.request.user
        )
        q = (self.request.query_params.get('q') or '').strip()
        if q:
            queryset = queryset.filter(
                Q(description__icontains=q) |
                Q(item__name_en__icontains=q) |
                Q(item__name_am__icontains=q) |
                Q(item__name_ru__icontains=q) |
                Q(group__name_en__icontains=q) |
                Q(group__name_am__icontains=q) |
                Q(group__name_ru__icontains=q)
            )
        return queryset


class AppliedAnnouncementListView(generics.ListAPIView):
    """
    GET /api/announcements/applied/

    Announcements the caller has applied to, each with the caller's
    applications attached.
    """

    serializer_class = AppliedAnnouncementSerializer

    def get_queryset(self):
        user = self.request.user
        return _base_queryset().filter(applications__applicant=user).prefetch_related(
            Prefetch('applications', queryset=Application.objects.filter(applicant=user))
        ).distinct()


class AnnouncementDetailView(APIView):
    """
    GET    /api/announcements/<id>/
    PATCH  /api/announcements/<id>/
    DELETE /api/announcements/<id>/   (soft delete)
    """

    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_object(self, id):
        try:
            return _base_queryset().get(pk=id)
        except Announcement.DoesNotExist:
            raise NotFound(f'Announcement with ID {id} not found')

    def get(self, request, id):
        announcement = self.get_object(id)
        # Unpublished listings are visible to their owner and admins only
        if (
            announcement.status != Announcement.Status.PUBLISHED and
            not request.user.is_admin and
            not announcement.is_owned_by(request.user)
        ):
            raise NotFound(f'Announcement with ID {id} not found')
        return Response(AnnouncementSerializer(announcement).data)

    def patch(self, request, id):
        serializer = AnnouncementUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        announcement = get_announcement_service().update(
            id,
            request.user,
            serializer.validated_data,
            uploaded_files=_uploaded_images(request),
        )
        return Response(AnnouncementSerializer(self.get_object(announcement.id)).data)

    def delete(self, request, id):
        get_announcement_service().delete(id, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class RecordAnnouncementViewView(APIView):
    """
    POST /api/announcements/<id>/view/

    Returns {viewed, views_count}. Each user counts once; owners never count.
    """

    def post(self, request, id):
        result = get_announcement_service().record_view(id, request.user)
        return Response(result)


class AnnouncementTransitionView(APIView):
    """
    Base for the status transition endpoints; subclasses name the service
    method to call.
    """

    transition = None

    def post(self, request, id):
        service = get_announcement_service()
        announcement = getattr(service, self.transition)(id, request.user)
        return Response(AnnouncementSerializer(announcement).data)


class PublishAnnouncementView(AnnouncementTransitionView):
    """POST /api/announcements/<id>/publish/ (admin)"""
    permission_classes = [IsMarketplaceAdmin]
    transition = 'publish'


class BlockAnnouncementView(AnnouncementTransitionView):
    """POST /api/announcements/<id>/block/ (admin)"""
    permission_classes = [IsMarketplaceAdmin]
    transition = 'block'


class CloseAnnouncementView(AnnouncementTransitionView):
    """POST /api/announcements/<id>/close/ (owner or admin)"""
    transition = 'close'


class CancelAnnouncementView(AnnouncementTransitionView):
    """POST /api/announcements/<id>/cancel/ (owner)"""
    transition = 'cancel'


class ExpirySweepView(APIView):
    """
    POST /api/announcements/expiry-sweep/

    Run an expiry pass on demand (admin). Returns the sweep summary.
    """

    permission_classes = [IsMarketplaceAdmin]

    def post(self, request):
        result = get_expiry_sweeper().sweep()
        if result['skipped']:
            return Response(result, status=status.HTTP_409_CONFLICT)
        return Response(result)


class FavoriteListCreateView(generics.ListCreateAPIView):
    """
    GET  /api/announcements/favorites/
        The caller's saved announcements that are still published.

    POST /api/announcements/favorites/
        Body: {"announcement_id": "<uuid>"}. Published announcements only.
    """

    serializer_class = FavoriteSerializer

    def get_queryset(self):
        return get_favorites_service().list_mine(self.request.user)

    def create(self, request, *args, **kwargs):
        serializer = FavoriteCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        favorite = get_favorites_service().add(
            request.user, serializer.validated_data['announcement_id']
        )
        return Response(FavoriteSerializer(favorite).data, status=status.HTTP_201_CREATED)


class FavoriteDeleteView(APIView):
    """DELETE /api/announcements/favorites/<announcement_id>/"""

    def delete(self, request, announcement_id):
        get_favorites_service().remove(request.user, announcement_id)
        return Response(status=status.HTTP_204_NO_CONTENT)
