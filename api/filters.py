"""
Query-parameter filters shared by list endpoints
"""
from rest_framework import filters


def filter_by_building(queryset, params, field='building'):
    """Apply ?buildingId= / ?buildingName= ('all' means no filter)"""
    building_id = params.get('buildingId')
    building_name = params.get('buildingName')
    if building_id and building_id != 'all':
        queryset = queryset.filter(**{f'{field}_id': building_id})
    if building_name and building_name.lower() != 'all':
        queryset = queryset.filter(**{f'{field}__name__iexact': building_name})
    return queryset


class BuildingFilterBackend(filters.BaseFilterBackend):
    """
    Narrow a queryset with ?buildingId= or ?buildingName=.

    Views declare `building_field` as the ORM path to the building
    ('building' for tenants, 'tenant__building' for transactions).
    """

    def filter_queryset(self, request, queryset, view):
        return filter_by_building(queryset, request.query_params, getattr(view, 'building_field', 'building'))
