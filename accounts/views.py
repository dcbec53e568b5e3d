import logging

from django.contrib.auth import get_user_model
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from .permissions import IsSignedIn
from .policies import AccessDecision, UserPolicy, evaluate_access, redirect_target
from .serializers import (
    LoginSerializer,
    LogoutSerializer,
    UserRegistrationSerializer,
    UserSerializer,
)
from .session import SessionProvider

logger = logging.getLogger(__name__)

User = get_user_model()


def _token_pair(user):
    refresh = RefreshToken.for_user(user)
    return {
        'refresh': str(refresh),
        'access': str(refresh.access_token),
    }


class UserRegistrationView(generics.CreateAPIView):
    """
    API endpoint for user registration.
    No authentication required.
    """
    queryset = User.objects.all()
    serializer_class = UserRegistrationSerializer
    permission_classes = [permissions.AllowAny]

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        logger.info(f"Registered {user.role} account {user.email}")

        return Response({
            'message': 'User registered successfully',
            'user': UserSerializer(user).data,
            'tokens': _token_pair(user),
        }, status=status.HTTP_201_CREATED)


class LoginView(APIView):
    """
    API endpoint for email/password sign-in.
    Returns a JWT pair plus the session profile.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = SessionProvider(request=request)
        signed_in = session.sign_in(
            serializer.validated_data['email'],
            serializer.validated_data['password']
        )

        if not signed_in:
            return Response(
                {'error': 'Invalid email or password, or the account is inactive'},
                status=status.HTTP_401_UNAUTHORIZED
            )

        user = session.signed_in_user()
        profile = session.current_profile()

        return Response({
            'message': 'Login successful',
            'user': UserSerializer(user).data,
            'profile': profile.as_dict() if profile else None,
            'tokens': _token_pair(user),
        }, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """
    API endpoint for user logout.
    Blacklists the refresh token and drops the cached profile.
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request):
        serializer = LogoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        session = SessionProvider.from_request(request)
        try:
            session.sign_out(serializer.validated_data.get('refresh_token'))
        except TokenError as e:
            return Response(
                {'error': str(e)},
                status=status.HTTP_400_BAD_REQUEST
            )

        return Response({
            'message': 'Logout successful'
        }, status=status.HTTP_200_OK)


class UserProfileView(generics.RetrieveUpdateAPIView):
    """
    API endpoint for retrieving and updating user profile.
    Only the fields UserPolicy marks editable are applied.
    """
    serializer_class = UserSerializer
    permission_classes = [IsSignedIn]

    def get_object(self):
        return self.request.user

    def update(self, request, *args, **kwargs):
        user = self.get_object()
        allowed = UserPolicy.editable_fields(request.user, user)
        data = {key: value for key, value in request.data.items() if key in allowed}

        serializer = self.get_serializer(user, data=data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()

        SessionProvider.invalidate_profile(str(user.pk))

        return Response(serializer.data)


class SessionView(APIView):
    """
    Current session state: anonymous or authenticated, plus the profile.
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        session = SessionProvider.from_request(request)
        session.load_profile()
        state = session.state()

        return Response({
            'status': state.status,
            'identity': {
                'subject_id': state.identity.subject_id,
                'email': state.identity.email,
            } if state.identity else None,
            'profile': state.profile.as_dict() if state.profile else None,
        })


class AccessCheckView(APIView):
    """
    Run the access gate for a client-side route.

    Query params:
        role: required role of the route (consumer, farmer, admin); omit for
              routes open to any signed-in user
    """
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        required_role = request.query_params.get('role') or None

        if required_role and required_role not in User.UserRole.values:
            return Response(
                {'error': f"Unknown role '{required_role}'"},
                status=status.HTTP_400_BAD_REQUEST
            )

        session = SessionProvider.from_request(request)
        session.load_profile()
        state = session.state()
        decision = evaluate_access(required_role, state)

        return Response({
            'decision': decision.value,
            'redirect': redirect_target(decision, state),
            'render': decision == AccessDecision.RENDER,
        })
