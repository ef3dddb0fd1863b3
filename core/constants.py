"""
Application-wide constants.
"""

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
]


# User Roles
class UserRole:
    ADMIN = 'admin'
    VIEWER = 'viewer'

    CHOICES = [
        (ADMIN, 'Admin'),
        (VIEWER, 'Viewer'),
    ]


class UserStatus:
    ACTIVE = 'active'
    SUSPENDED = 'suspended'

    CHOICES = [
        (ACTIVE, 'Active'),
        (SUSPENDED, 'Suspended'),
    ]


class BuildingType:
    RESIDENTIAL = 'residential'
    COMMERCIAL = 'commercial'
    MIXED = 'mixed'

    CHOICES = [
        (RESIDENTIAL, 'Residential'),
        (COMMERCIAL, 'Commercial'),
        (MIXED, 'Mixed Use'),
    ]


BUILDING_ICONS = [f'b{i}' for i in range(10)]


class TenantStatus:
    ACTIVE = 'active'
    LEFT = 'left'

    CHOICES = [
        (ACTIVE, 'Active'),
        (LEFT, 'Left'),
    ]


# Payment status of a month, as shown on the tenants page
class PaymentStatus:
    PAID = 'paid'
    PENDING = 'pending'
    OVERDUE = 'overdue'


# Status of a month in a tenant's payment history
class HistoryStatus:
    PAID = 'paid'
    PARTIAL = 'partial'
    UNPAID = 'unpaid'
    DEPOSIT = 'deposit'


class PaymentMethod:
    MPESA = 'mpesa'
    CASH = 'cash'
    BANK = 'bank'
    CHEQUE = 'cheque'

    CHOICES = [
        (MPESA, 'M-Pesa'),
        (CASH, 'Cash'),
        (BANK, 'Bank Transfer'),
        (CHEQUE, 'Cheque'),
    ]


class MaintenanceStatus:
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    CHOICES = [
        (PENDING, 'Pending'),
        (IN_PROGRESS, 'In Progress'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
    ]

    TRANSITIONS = {
        PENDING: {IN_PROGRESS, COMPLETED, CANCELLED},
        IN_PROGRESS: {PENDING, COMPLETED, CANCELLED},
        COMPLETED: set(),
        CANCELLED: set(),
    }


class Priority:
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'

    CHOICES = [
        (LOW, 'Low'),
        (MEDIUM, 'Medium'),
        (HIGH, 'High'),
    ]


class Currency:
    KES = 'KES'
    USD = 'USD'

    CHOICES = [
        (KES, 'Kenyan Shilling'),
        (USD, 'US Dollar'),
    ]


# Default Limits
class DefaultLimits:
    RENT_DUE_DAY = 5
    GARBAGE_BILL = 150
    AI_QUERY_MAX_LENGTH = 500
    AI_HISTORY_LENGTH = 10
    AI_SESSION_TIMEOUT = 60 * 60
