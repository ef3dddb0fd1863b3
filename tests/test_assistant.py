from decimal import Decimal

import pytest

from assistant.services import AssistantService, HELP_TEXT
from assistant.views import AssistantRateThrottle
from billing.models import Penalty
from buildings.models import Unit

pytestmark = pytest.mark.django_db


def ask(client, query, session='chat-1'):
    return client.post('/api/v1/ai/query', {'query': query, 'sessionId': session}, format='json')


@pytest.fixture
def vacant_unit(building, bedsitter):
    return Unit.objects.create(building=building, unit_type=bedsitter, unit_number='C3')


def test_vacancies_list_prices(viewer_client, tenant, vacant_unit):
    response = ask(viewer_client, 'Which units are vacant in Sunrise Apartments?')

    assert response.status_code == 200
    body = response.json()
    assert body['success'] is True
    assert 'House C3 (Bedsitter) at KES 10,000.00/month' in body['response']
    assert 'A1' not in body['response']
    assert body['timestamp']


def test_follow_up_uses_building_from_conversation(viewer_client, building, vacant_unit):
    Penalty.objects.create(building=building, percentage=Decimal('5'))

    ask(viewer_client, 'Any vacancies in Sunrise Apartments?')
    response = ask(viewer_client, 'What is the late payment interest there?')

    assert response.json()['response'].startswith('Sunrise Apartments charges 5')


def test_sessions_do_not_share_context(viewer_client, building, vacant_unit):
    Penalty.objects.create(building=building, percentage=Decimal('5'))

    ask(viewer_client, 'Any vacancies in Sunrise Apartments?', session='first')
    response = ask(viewer_client, 'What is the late payment interest there?', session='second')

    assert response.json()['response'].startswith('Late payment interest on unpaid rent')


def test_balances_answer(viewer_client, tenant):
    response = ask(viewer_client, 'Who owes money this month?')

    text = response.json()['response']
    assert '1 tenants owe a total of KES 10,650.00' in text
    assert 'Jane Wanjiku' in text


def test_building_details(viewer_client, tenant):
    text = ask(viewer_client, 'Tell me about Sunrise Apartments').json()['response']

    assert 'WiFi: installed' in text
    assert 'Units: 1 total, 1 occupied, 0 vacant' in text
    assert '- Bedsitter: KES 10,000.00/month' in text


def test_unrecognised_question_gets_help(viewer_client):
    assert ask(viewer_client, 'hello').json()['response'] == HELP_TEXT


@pytest.mark.parametrize('query, message', [
    ('', 'Please enter a question'),
    ('x' * 501, 'Question is too long (max 500 characters)'),
])
def test_invalid_queries(viewer_client, query, message):
    response = ask(viewer_client, query)

    assert response.status_code == 400
    assert response.json()['message'] == message
    assert 'query' in response.json()['errors']


def test_history_is_trimmed(settings, viewer_user, building):
    settings.AI_HISTORY_LENGTH = 4
    service = AssistantService('history-test', user=viewer_user)
    for _ in range(5):
        service.answer('Which buildings do we have?')

    history = service.load_session()['history']
    assert len(history) == 4
    assert history[-1]['role'] == 'assistant'


def test_clear_forgets_conversation(viewer_client, viewer_user, building):
    ask(viewer_client, 'Tell me about Sunrise Apartments')
    session = AssistantService(f'{viewer_user.pk}:chat-1')
    assert session.load_session()['building_id'] == building.id

    response = viewer_client.post('/api/v1/ai/clear', {'sessionId': 'chat-1'}, format='json')

    assert response.status_code == 200
    assert session.load_session() == {'history': [], 'building_id': None}


def test_queries_are_rate_limited(viewer_client, monkeypatch):
    monkeypatch.setattr(AssistantRateThrottle, 'THROTTLE_RATES', {'ai': '2/min'})

    assert ask(viewer_client, 'hello').status_code == 200
    assert ask(viewer_client, 'hello').status_code == 200
    response = ask(viewer_client, 'hello')

    assert response.status_code == 429
    assert response.json()['code'] == 'THROTTLED'
