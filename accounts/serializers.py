from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

User = get_user_model()


class UserRegistrationSerializer(serializers.ModelSerializer):
    """
    Serializer for user registration.
    Handles password validation and user creation.

    Admin accounts are never self-registered; use the create_admin command.
    """
    password = serializers.CharField(
        write_only=True,
        required=True,
        validators=[validate_password],
        style={'input_type': 'password'}
    )
    password_confirm = serializers.CharField(
        write_only=True,
        required=True,
        style={'input_type': 'password'}
    )
    role = serializers.ChoiceField(
        choices=[User.UserRole.CONSUMER, User.UserRole.FARMER],
        default=User.UserRole.CONSUMER
    )

    class Meta:
        model = User
        fields = (
            'id', 'username', 'email', 'password', 'password_confirm',
            'display_name', 'first_name', 'last_name', 'role'
        )
        read_only_fields = ('id',)

    def validate(self, attrs):
        """Validate that passwords match."""
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError(
                {"password": "Password fields didn't match."}
            )
        return attrs

    def create(self, validated_data):
        """Create a new user with encrypted password."""
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')

        user = User(**validated_data)
        if not user.display_name:
            user.display_name = user.get_display_name()
        user.set_password(password)
        user.save()

        return user


class UserSerializer(serializers.ModelSerializer):
    """
    Serializer for user details.
    Role and account status are read-only here.
    """
    role_display = serializers.CharField(source='get_role_display', read_only=True)

    class Meta:
        model = User
        fields = (
            'id', 'username', 'email', 'display_name', 'first_name', 'last_name',
            'role', 'role_display', 'account_status', 'date_joined', 'created_at'
        )
        read_only_fields = (
            'id', 'username', 'email', 'role', 'role_display',
            'account_status', 'date_joined', 'created_at'
        )


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(style={'input_type': 'password'}, trim_whitespace=False)


class LogoutSerializer(serializers.Serializer):
    refresh_token = serializers.CharField(required=False, allow_blank=True)


class AdminUserSerializer(serializers.ModelSerializer):
    """User row for the admin user management table."""
    role_display = serializers.CharField(source='get_role_display', read_only=True)

    class Meta:
        model = User
        fields = (
            'id', 'email', 'display_name', 'role', 'role_display',
            'account_status', 'created_at'
        )
        read_only_fields = fields


class AccountStatusSerializer(serializers.Serializer):
    account_status = serializers.ChoiceField(
        choices=User.AccountStatus.choices,
        required=False,
        help_text="Omit to toggle between active and inactive"
    )
