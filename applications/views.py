"""
Application Views
"""
from rest_framework import generics, status
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import (
    ApplicationCreateSerializer,
    ApplicationSerializer,
    ApplicationTermsSerializer,
    MyApplicationSerializer,
)
from .services.application_lifecycle import get_application_service


class ApplicationCreateView(APIView):
    """
    POST /api/applications/

    Body: announcement_id, count (goods only), delivery_dates, notes
    """

    def post(self, request):
        serializer = ApplicationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        announcement_id = data.pop('announcement_id')

        application = get_application_service().create(request.user, announcement_id, data)
        return Response(
            {
                'message': 'Your application was submitted to the announcement owner',
                'application': ApplicationSerializer(application).data,
            },
            status=status.HTTP_201_CREATED
        )


class MyApplicationListView(generics.ListAPIView):
    """
    GET /api/applications/me/

    Query Parameters:
    - status: pending, approved, rejected, closed
    """

    serializer_class = MyApplicationSerializer

    def get_queryset(self):
        queryset = get_application_service().list_mine(self.request.user)
        status_param = self.request.query_params.get('status')
        if status_param:
            queryset = queryset.filter(status=status_param)
        return queryset


class AnnouncementApplicationListView(generics.ListAPIView):
    """
    GET /api/applications/announcement/<announcement_id>/

    The owner (and admins) see all applications; other users see their own.
    """

    serializer_class = ApplicationSerializer

    def get_queryset(self):
        queryset = get_application_service().list_for_announcement(
            self.kwargs['announcement_id'], self.request.user
        )
        status_param = self.request.query_params.get('status')
        if status_param:
            queryset = queryset.filter(status=status_param)
        return queryset


class ApplicationDetailView(APIView):
    """
    GET   /api/applications/<id>/
    PATCH /api/applications/<id>/   (pending only; applicant or owner)
    """

    def get(self, request, id):
        application = get_application_service().get(id, request.user)
        return Response(ApplicationSerializer(application).data)

    def patch(self, request, id):
        serializer = ApplicationTermsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        application = get_application_service().edit(id, request.user, serializer.validated_data)
        return Response(ApplicationSerializer(application).data)


class ApproveApplicationView(APIView):
    """POST /api/applications/<id>/approve/"""

    def post(self, request, id):
        application = get_application_service().approve(id, request.user)
        return Response(ApplicationSerializer(application).data)


class RejectApplicationView(APIView):
    """POST /api/applications/<id>/reject/"""

    def post(self, request, id):
        application = get_application_service().reject(id, request.user)
        return Response(ApplicationSerializer(application).data)


class CloseApplicationView(APIView):
    """POST /api/applications/<id>/close/"""

    def post(self, request, id):
        application = get_application_service().close(id, request.user)
        return Response(ApplicationSerializer(application).data)


class ReopenApplicationView(APIView):
    """
    POST /api/applications/<id>/reopen/

    Optional body with new count / delivery_dates / notes.
    """

    def post(self, request, id):
        serializer = ApplicationTermsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        application = get_application_service().reopen(id, request.user, serializer.validated_data)
        return Response(ApplicationSerializer(application).data)
