"""
Helpers for the success envelope used by every endpoint:

    {"success": true, "data": ..., "message": "..."}
"""
from rest_framework import status
from rest_framework.response import Response


def success_response(data=None, message=None, status_code=status.HTTP_200_OK, **extra):
    body = {'success': True}
    if data is not None:
        body['data'] = data
    if message:
        body['message'] = message
    body.update(extra)
    return Response(body, status=status_code)


def created_response(data=None, message=None, **extra):
    return success_response(data, message, status_code=status.HTTP_201_CREATED, **extra)


def records_response(records, **extra):
    """List endpoints the dashboard consumes as {success, count, records}"""
    return Response({'success': True, 'count': len(records), 'records': records, **extra})
