from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'email', 'business', 'role', 'is_active', 'date_joined']
    list_filter = ['role', 'is_active', 'is_superuser', 'date_joined']
    search_fields = ['username', 'email', 'first_name', 'last_name', 'business__name']
    ordering = ['username']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Business', {'fields': ('phone', 'business', 'role')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Business', {'fields': ('phone', 'business', 'role')}),
    )


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'business', 'action', 'model_name', 'object_id', 'ip_address', 'created_at']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['user__username', 'model_name', 'object_id', 'object_name']
    ordering = ['-created_at']
    readonly_fields = ['user', 'business', 'action', 'model_name', 'object_id', 'object_name', 'changes', 'ip_address', 'created_at']
