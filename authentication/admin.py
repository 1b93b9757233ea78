from django.contrib import admin

from .models import User, Branch


@admin.register(Branch)
class BranchAdmin(admin.ModelAdmin):
    list_display = ['name', 'address', 'created_at']
    search_fields = ['name']


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    ordering = ['email']
    list_display = ['email', 'name', 'role', 'branch', 'is_active']
    list_filter = ['role', 'branch', 'is_active']
    search_fields = ['email', 'name']
    fields = ['email', 'name', 'role', 'branch', 'is_active', 'is_staff', 'is_superuser']
