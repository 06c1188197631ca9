from rest_framework import serializers
from django.contrib.auth import authenticate, get_user_model
from rest_framework_simplejwt.tokens import RefreshToken

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    role = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ('id', 'username', 'full_name', 'email', 'utype', 'role', 'last_login')

    def get_role(self, obj):
        return obj.role.value


class GatePassTokenObtainPairSerializer(serializers.Serializer):
    """Issue a JWT pair for API clients.

    Credentials go through the same backends as the login page, so a
    registration number + NIC works here too.
    """
    username = serializers.CharField(write_only=True)
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        username = (attrs.get('username') or '').strip()
        password = attrs.get('password')

        if not username or not password:
            raise serializers.ValidationError('Must include "username" and "password".')

        user = authenticate(self.context.get('request'), username=username, password=password)
        if user is None:
            raise serializers.ValidationError('Unable to log in with provided credentials.')

        refresh = RefreshToken.for_user(user)
        refresh['role'] = user.role.value
        refresh['utype'] = user.utype

        return {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
            'role': user.role.value,
        }
