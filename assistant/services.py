"""
Property assistant: answers questions about vacancies, late payment
interest, buildings, occupancy and balances from the live data.

Each chat session keeps its recent messages and the last building it
talked about in the cache, so "and what about its amenities?" works.
"""
import re

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from billing.models import Penalty
from billing.services import BillingService
from buildings.models import Building, Unit
from common.models import SiteSettings
from common.pdf_utils import format_money
from core.constants import DefaultLimits
from core.services import BaseService
from tenants.models import Tenant

# Checked in order; the first topic with a matching keyword wins
TOPICS = [
    ('vacancies', ('vacant', 'vacancy', 'vacancies', 'available', 'empty', 'price', 'prices', 'cost')),
    ('penalties', ('penalty', 'penalties', 'interest', 'late', 'fine', 'fines')),
    ('balances', ('balance', 'balances', 'owe', 'owes', 'owing', 'arrears', 'outstanding', 'unpaid', 'debt')),
    ('occupancy', ('occupancy', 'occupied', 'full', 'tenants')),
    ('buildings', ('building', 'buildings', 'amenities', 'amenity', 'wifi', 'address', 'location', 'where',
                   'staff', 'caretaker', 'info', 'about')),
]
REFERENCE_WORDS = {'it', 'its', 'there', 'that', 'this', 'same'}
MAX_LINES = 15

HELP_TEXT = (
    "I can help you with:\n"
    "- Vacant units and their prices\n"
    "- Late payment interest rates by building\n"
    "- Building information and amenities\n"
    "- Occupancy statistics\n"
    "- Outstanding balances\n\n"
    "Try \"Which units are vacant in Sunrise Apartments?\""
)


def _cache_key(session_id):
    return f"assistant:session:{session_id}"


def _limited(lines):
    if len(lines) <= MAX_LINES:
        return lines
    return lines[:MAX_LINES] + [f"...and {len(lines) - MAX_LINES} more"]


class AssistantService(BaseService):

    def __init__(self, session_id, user=None, request=None):
        super().__init__(user=user, request=request)
        self.session_id = session_id
        self.currency = SiteSettings.load().currency_code

    # ------------------------------------------------------------------
    # Session memory
    # ------------------------------------------------------------------

    def load_session(self):
        return cache.get(_cache_key(self.session_id)) or {'history': [], 'building_id': None}

    def save_session(self, session):
        limit = getattr(settings, 'AI_HISTORY_LENGTH', DefaultLimits.AI_HISTORY_LENGTH)
        session['history'] = session['history'][-limit:]
        timeout = getattr(settings, 'AI_SESSION_TIMEOUT', DefaultLimits.AI_SESSION_TIMEOUT)
        cache.set(_cache_key(self.session_id), session, timeout)

    def clear(self):
        cache.delete(_cache_key(self.session_id))
        self.log_info("Assistant session cleared", session=self.session_id)

    # ------------------------------------------------------------------
    # Understanding the question
    # ------------------------------------------------------------------

    @staticmethod
    def detect_topic(words):
        for topic, keywords in TOPICS:
            if words & set(keywords):
                return topic
        return None

    @staticmethod
    def find_building(text):
        """Longest building name (or code) mentioned in the text"""
        matches = [
            b for b in Building.objects.all()
            if b.name.lower() in text or re.search(rf"\b{re.escape(b.code.lower())}\b", text)
        ]
        return max(matches, key=lambda b: len(b.name), default=None)

    def answer(self, query):
        text = query.strip().lower()
        words = set(re.findall(r"[a-z0-9']+", text))
        session = self.load_session()

        building = self.find_building(text)
        if building is None and session['building_id'] and words & REFERENCE_WORDS:
            building = Building.objects.filter(pk=session['building_id']).first()

        topic = self.detect_topic(words)
        if topic is None and building is not None:
            topic = 'buildings'

        if topic is None:
            response = HELP_TEXT
        else:
            response = getattr(self, f'answer_{topic}')(building)

        now = timezone.now().isoformat()
        session['history'].append({'role': 'user', 'content': query.strip(), 'timestamp': now})
        session['history'].append({'role': 'assistant', 'content': response, 'timestamp': now})
        if building is not None:
            session['building_id'] = building.id
        self.save_session(session)

        self.log_info("Assistant answered", session=self.session_id, topic=topic,
                      building=building.id if building else None)
        return response

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    def answer_vacancies(self, building=None):
        units = Unit.objects.filter(is_occupied=False).select_related('building', 'unit_type__unit_type')
        if building:
            units = units.filter(building=building)
        units = list(units.order_by('building__name', 'unit_number'))
        where = f" in {building.name}" if building else ""
        if not units:
            return f"There are no vacant units{where} right now."

        lines = []
        for unit in units:
            label = f"House {unit.unit_number}"
            if unit.unit_type:
                label += (f" ({unit.unit_type.unit_type.name}) at "
                          f"{format_money(unit.unit_type.monthly_rent, self.currency)}/month")
            if not building:
                label = f"{unit.building.name}: {label}"
            lines.append(f"- {label}")
        return f"There are {len(units)} vacant units{where}:\n" + "\n".join(_limited(lines))

    def answer_penalties(self, building=None):
        due_day = SiteSettings.load().rent_due_day
        if building:
            penalty = Penalty.objects.filter(building=building).first()
            if penalty is None:
                return f"No late payment interest is configured for {building.name}."
            return (f"{building.name} charges {penalty.percentage}% interest on unpaid rent "
                    f"after day {due_day} of the month.")

        penalties = list(Penalty.objects.select_related('building').order_by('building__name'))
        if not penalties:
            return "No late payment interest is configured for any building."
        lines = [f"- {p.building.name}: {p.percentage}%" for p in penalties]
        return (f"Late payment interest on unpaid rent (applied after day {due_day}):\n"
                + "\n".join(_limited(lines)))

    def answer_buildings(self, building=None):
        if building is None:
            buildings = list(Building.objects.order_by('name'))
            if not buildings:
                return "No buildings have been added yet."
            lines = []
            for b in buildings:
                details = [b.get_type_display()]
                if b.city:
                    details.append(b.city)
                if b.wifi_installed:
                    details.append("WiFi")
                lines.append(f"- {b.name} ({', '.join(details)})")
            return f"You manage {len(buildings)} buildings:\n" + "\n".join(_limited(lines))

        lines = [f"{building.name} ({building.code}) is a {building.get_type_display().lower()} building."]
        location = ", ".join(part for part in (building.address, building.city) if part)
        if location:
            lines.append(f"Location: {location}")
        lines.append(f"WiFi: {'installed' if building.wifi_installed else 'not installed'}")
        lines.append(f"Units: {building.total_units} total, {building.occupied_units} occupied, "
                     f"{building.vacant_units} vacant")

        unit_types = building.unit_types.select_related('unit_type').order_by('monthly_rent')
        if unit_types:
            lines.append("House types:")
            lines.extend(f"- {c.unit_type.name}: {format_money(c.monthly_rent, self.currency)}/month"
                         for c in unit_types)
        staff = list(building.staff.all())
        if staff:
            lines.append("Staff:")
            lines.extend(f"- {s.name}, {s.role}" + (f" ({s.phone})" if s.phone else "") for s in staff)
        return "\n".join(lines)

    def answer_occupancy(self, building=None):
        buildings = [building] if building else list(Building.objects.order_by('name'))
        if not buildings:
            return "No buildings have been added yet."

        lines = []
        total = occupied = 0
        for b in buildings:
            total += b.total_units
            occupied += b.occupied_units
            rate = round(b.occupied_units * 100 / b.total_units) if b.total_units else 0
            lines.append(f"- {b.name}: {b.occupied_units}/{b.total_units} units occupied ({rate}%)")

        tenants = Tenant.objects.active()
        if building:
            tenants = tenants.filter(building=building)
        overall = round(occupied * 100 / total) if total else 0
        header = f"Occupancy is {overall}% ({occupied} of {total} units) with {tenants.count()} active tenants."
        if building:
            return header
        return header + "\n" + "\n".join(_limited(lines))

    def answer_balances(self, building=None):
        billing = BillingService(user=self.user, request=self.request)
        today = billing.today
        records = [
            r for r in billing.ensure_records(today.month, today.year)
            if building is None or r.tenant.building_id == building.id
        ]
        owing = sorted(
            (r for r in records if r.effective_balance > 0),
            key=lambda r: r.effective_balance, reverse=True
        )
        where = f" in {building.name}" if building else ""
        period = today.strftime('%B %Y')
        if not owing:
            return f"All tenants{where} are paid up for {period}."

        total = sum(r.effective_balance for r in owing)
        lines = [
            f"- {r.tenant.name} (house {r.tenant.house_number}, {r.tenant.building.name}): "
            f"{format_money(r.effective_balance, self.currency)}"
            for r in owing
        ]
        return (f"{len(owing)} tenants{where} owe a total of {format_money(total, self.currency)} "
                f"for {period}:\n" + "\n".join(_limited(lines)))
