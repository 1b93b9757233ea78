from rest_framework import serializers
from django.contrib.auth import authenticate
from django.contrib.auth.password_validation import validate_password
from django.utils.translation import gettext_lazy as _

from .models import User, Branch
from .permissions import get_user_permissions


class BranchSerializer(serializers.ModelSerializer):
    users_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Branch
        fields = ['id', 'name', 'address', 'users_count', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class UserSerializer(serializers.ModelSerializer):
    branch_name = serializers.CharField(source='branch.name', read_only=True, default=None)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'branch', 'branch_name', 'is_active', 'date_joined']
        read_only_fields = fields


class EmployeeSerializer(serializers.ModelSerializer):
    """Create and update employee accounts (admin only)"""
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)
    password_confirmation = serializers.CharField(write_only=True, required=False, allow_blank=True)
    branch_id = serializers.PrimaryKeyRelatedField(
        source='branch', queryset=Branch.objects.all(), required=False, allow_null=True
    )
    branch_name = serializers.CharField(source='branch.name', read_only=True, default=None)

    class Meta:
        model = User
        fields = [
            'id', 'name', 'email', 'role', 'branch_id', 'branch_name',
            'password', 'password_confirmation', 'is_active', 'date_joined'
        ]
        read_only_fields = ['id', 'is_active', 'date_joined']
        extra_kwargs = {
            'name': {'max_length': 255},
            'email': {'max_length': 255},
        }

    def validate(self, attrs):
        password = attrs.get('password')
        confirmation = attrs.pop('password_confirmation', None)

        if self.instance is None and not password:
            raise serializers.ValidationError({'password': _('This field is required.')})

        if password:
            if password != confirmation:
                raise serializers.ValidationError({'password': _("Passwords don't match")})
            validate_password(password, self.instance)
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)

        for attr, value in validated_data.items():
            setattr(instance, attr, value)

        if password:
            instance.set_password(password)

        instance.save()
        return instance


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        user = authenticate(
            request=self.context.get('request'),
            username=attrs['email'],
            password=attrs['password'],
        )
        if not user:
            raise serializers.ValidationError(_('Invalid email or password'))

        if not user.is_active:
            raise serializers.ValidationError(_('User account is disabled'))

        attrs['user'] = user
        return attrs


class ProfileSerializer(serializers.ModelSerializer):
    """Current user with role capabilities"""
    branch_name = serializers.CharField(source='branch.name', read_only=True, default=None)
    permissions = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'role', 'branch', 'branch_name', 'permissions']
        read_only_fields = ['id', 'email', 'role', 'branch', 'branch_name', 'permissions']

    def get_permissions(self, obj):
        return get_user_permissions(obj)
