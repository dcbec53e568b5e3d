from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth import get_user_model
from django.contrib import admin

User = get_user_model()


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin interface for the custom User model."""

    list_display = (
        'email', 'display_name', 'role', 'account_status',
        'is_staff', 'created_at'
    )
    list_filter = ('role', 'account_status', 'is_staff', 'created_at')
    search_fields = ('email', 'username', 'display_name', 'first_name', 'last_name')
    ordering = ('-created_at',)

    fieldsets = (
        (None, {'fields': ('email', 'username', 'password')}),
        ('Personal Info', {
            'fields': ('display_name', 'first_name', 'last_name')
        }),
        ('Marketplace', {
            'fields': ('role', 'account_status')
        }),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')
        }),
        ('Important Dates', {
            'fields': ('last_login', 'date_joined', 'created_at', 'updated_at')
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'email', 'username', 'display_name', 'password1', 'password2', 'role'
            ),
        }),
    )

    readonly_fields = ('date_joined', 'last_login', 'created_at', 'updated_at')

    def get_readonly_fields(self, request, obj=None):
        # Role is fixed once the account exists
        if obj is not None:
            return self.readonly_fields + ('role',)
        return self.readonly_fields
