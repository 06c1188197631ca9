from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.serializers import UserSerializer
from accounts.services_dashboard import resolve_dashboard


class DashboardView(APIView):
    """Role and task list for the authenticated user. GET /api/user/dashboard"""

    def get(self, request, *args, **kwargs):
        user = request.user
        if not getattr(user, 'is_active', False):
            return Response({'detail': 'User account is inactive.'}, status=status.HTTP_403_FORBIDDEN)

        data = resolve_dashboard(user)
        data['user'] = UserSerializer(user).data
        return Response(data)


__all__ = ['DashboardView']
