from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from core.validators import MOBILE_PATTERN
from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Public shape of a user, returned by login/refresh and the user admin"""
    createdAt = serializers.DateTimeField(source='date_joined', read_only=True)
    lastLogin = serializers.DateTimeField(source='last_login', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'mobile', 'role', 'status', 'createdAt', 'lastLogin']
        read_only_fields = ['id', 'status', 'createdAt', 'lastLogin']

    def validate_mobile(self, value):
        if value and not MOBILE_PATTERN.match(value):
            raise serializers.ValidationError("Enter a valid mobile number")
        return value


class UserCreateSerializer(UserSerializer):
    password = serializers.CharField(write_only=True, min_length=8, style={'input_type': 'password'})

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['password']

    def validate_password(self, value):
        validate_password(value)
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        user = User(**validated_data)
        user.set_password(password)
        user.save()
        return user


class UserUpdateSerializer(UserSerializer):
    """Password is optional on update; blank keeps the current one"""
    password = serializers.CharField(
        write_only=True, required=False, allow_blank=True, style={'input_type': 'password'}
    )

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['password']

    def validate_password(self, value):
        if value:
            validate_password(value)
        return value

    def update(self, instance, validated_data):
        password = validated_data.pop('password', '')
        for key, value in validated_data.items():
            setattr(instance, key, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(style={'input_type': 'password'})
