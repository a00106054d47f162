"""
Notification inbox endpoints.
"""
from rest_framework import generics, status
from rest_framework.views import APIView
from rest_framework.response import Response

from .serializers import NotificationSerializer
from .services import NotificationInboxService

inbox = NotificationInboxService()


class NotificationListView(generics.ListAPIView):
    """
    List the current user's notifications.

    GET /api/notifications/

    Query Parameters:
    - is_seen: true/false
    - type: notification type
    - page: Page number (default: 1)

    The paginated payload also carries unread_count.
    """
    serializer_class = NotificationSerializer

    def get_queryset(self):
        is_seen = self.request.query_params.get('is_seen')
        if is_seen is not None:
            is_seen = is_seen.lower() in ('true', '1')
        return inbox.list_for_user(
            self.request.user,
            is_seen=is_seen,
            notification_type=self.request.query_params.get('type'),
        )

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        response.data['unread_count'] = inbox.unread_count(request.user)
        return response


class UnreadCountView(APIView):
    """
    GET /api/notifications/unread-count/
    """

    def get(self, request):
        return Response({'unread_count': inbox.unread_count(request.user)})


class MarkNotificationSeenView(APIView):
    """
    POST /api/notifications/<id>/seen/
    """

    def post(self, request, id):
        notification = inbox.mark_as_seen(request.user, id)
        return Response(NotificationSerializer(notification).data)


class MarkAllNotificationsSeenView(APIView):
    """
    POST /api/notifications/seen-all/
    """

    def post(self, request):
        updated = inbox.mark_all_as_seen(request.user)
        return Response({'updated': updated}, status=status.HTTP_200_OK)
