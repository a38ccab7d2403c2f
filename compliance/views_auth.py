"""JWT authentication views for the admin front-end. Role in payload."""

from rest_framework_simplejwt.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.views import TokenObtainPairView


def _get_user_role(user):
    """Resolve role: admin, accountant, viewer."""
    if not user or not user.is_authenticated:
        return "viewer"
    if user.is_superuser or user.groups.filter(name="admin").exists():
        return "admin"
    if user.groups.filter(name="accountant").exists():
        return "accountant"
    if user.is_staff:
        return "admin"
    return "viewer"


class StaffTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_staff and not self.user.is_superuser:
            raise AuthenticationFailed("Staff access required")
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = _get_user_role(user)
        token["username"] = user.get_username()
        return token


class StaffTokenObtainPairView(TokenObtainPairView):
    serializer_class = StaffTokenObtainPairSerializer
