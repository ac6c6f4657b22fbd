from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Role, RoleChoices, User, UserRole
from .system_actors import SYSTEM_ACTORS

SYSTEM_ACTOR_EMAILS = {identity['email'] for identity in SYSTEM_ACTORS.values()}


class UserRoleInline(admin.TabularInline):
    model = UserRole
    extra = 0
    autocomplete_fields = ['role']


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Staff accounts. System actors are listed but cannot be edited: their
    email identifies them and they must never hold availability.
    """
    list_display = ['email', 'name', 'roles', 'can_have_availability', 'is_active', 'last_login']
    list_filter = ['can_have_availability', 'is_active', 'user_roles__role__name']
    search_fields = ['email', 'name']
    readonly_fields = ['id', 'created_at', 'updated_at', 'last_login']
    inlines = [UserRoleInline]
    ordering = ['email']

    fieldsets = (
        (None, {'fields': ('id', 'email', 'password')}),
        ('Clinician', {'fields': ('name', 'can_have_availability')}),
        ('Access', {'fields': ('is_active', 'is_staff', 'is_superuser')}),
        ('Dates', {'fields': ('last_login', 'created_at', 'updated_at')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'name', 'password1', 'password2', 'can_have_availability'),
        }),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).prefetch_related('user_roles__role')

    @admin.display(description='Roles')
    def roles(self, obj):
        return ', '.join(sorted(user_role.role.name for user_role in obj.user_roles.all()))

    def has_change_permission(self, request, obj=None):
        if obj is not None and obj.email in SYSTEM_ACTOR_EMAILS:
            return False
        return super().has_change_permission(request, obj)


@admin.register(Role)
class RoleAdmin(admin.ModelAdmin):
    list_display = ['name', 'created_at']
    search_fields = ['name']
    readonly_fields = ['id', 'created_at']

    def has_delete_permission(self, request, obj=None):
        # Fixed role set; the permission classes look them up by name
        if obj is not None and obj.name in RoleChoices.values:
            return False
        return super().has_delete_permission(request, obj)
