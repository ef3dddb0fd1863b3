from rest_framework import serializers

from core.constants import DefaultLimits


class QuerySerializer(serializers.Serializer):
    query = serializers.CharField(max_length=DefaultLimits.AI_QUERY_MAX_LENGTH, error_messages={
        'blank': 'Please enter a question',
        'max_length': f'Question is too long (max {DefaultLimits.AI_QUERY_MAX_LENGTH} characters)',
    })
    sessionId = serializers.CharField(max_length=100, default='default')


class ClearSerializer(serializers.Serializer):
    sessionId = serializers.CharField(max_length=100, default='default')
