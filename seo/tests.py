"""
Tests for the retirement API endpoints and request serializers.
"""
import csv
import io
from datetime import datetime

import pytest
from rest_framework.test import APIClient

from seo.serializers import ContentMetricsSerializer, build_weights, months_since

API_KEY = 'pp_test_key_123'


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def api_key_client(api_client, settings):
    settings.PRUNEPRO_API_KEYS = [API_KEY]
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {API_KEY}')
    return api_client


def _item(url, **metrics):
    return {'url': url, 'metrics': metrics}


class TestHealth:

    def test_health_needs_no_key(self, api_client):
        response = api_client.get('/api/v1/health/')
        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    def test_unknown_route_uses_error_envelope(self, api_client):
        response = api_client.get('/api/v1/nothing-here/')
        assert response.status_code == 404
        assert response.json()['error']['code'] == 'NOT_FOUND'


class TestAuthentication:

    def test_missing_key(self, api_client):
        response = api_client.post('/api/v1/retirement/analyze/', {'items': []}, format='json')
        assert response.status_code == 401

    def test_unknown_key(self, api_client, settings):
        settings.PRUNEPRO_API_KEYS = [API_KEY]
        api_client.credentials(HTTP_AUTHORIZATION='Bearer pp_not_a_real_key')

        response = api_client.post('/api/v1/retirement/analyze/', {'items': []}, format='json')
        assert response.status_code == 401

    def test_x_api_key_header(self, api_client, settings):
        settings.PRUNEPRO_API_KEYS = [API_KEY]
        api_client.credentials(HTTP_X_API_KEY=API_KEY)

        response = api_client.post('/api/v1/retirement/analyze/', {'items': []}, format='json')
        assert response.status_code == 200


class TestAnalyze:

    def test_analyze_batch(self, api_key_client):
        payload = {
            'items': [
                _item('https://example.com/guide', clicks=150, impressions=2500, position=8, backlinks=3),
                _item('https://example.com/blog/old-post', clicks=1, impressions=50, age_months=40),
            ],
        }
        response = api_key_client.post('/api/v1/retirement/analyze/', payload, format='json')

        assert response.status_code == 200
        data = response.data['data']
        assert [d['url'] for d in data['decisions']] == [
            'https://example.com/guide',
            'https://example.com/blog/old-post',
        ]
        assert data['decisions'][0]['decision']['action'] == 'keep'
        assert data['decisions'][0]['decision']['risk'] == 5
        assert data['simulation']['total_urls'] == 2
        assert data['report'].startswith('# PrunePro Simulation Report')

    def test_report_can_be_skipped(self, api_key_client):
        payload = {'items': [], 'include_report': False}
        response = api_key_client.post('/api/v1/retirement/analyze/', payload, format='json')

        assert response.status_code == 200
        assert 'report' not in response.data['data']

    def test_negative_metric_is_rejected(self, api_key_client):
        payload = {'items': [_item('https://example.com/a', clicks=-3)]}
        response = api_key_client.post('/api/v1/retirement/analyze/', payload, format='json')

        assert response.status_code == 400
        assert response.data['error']['code'] == 'VALIDATION_ERROR'

    def test_oversized_batch(self, api_key_client, settings):
        settings.PRUNEPRO_MAX_BATCH_SIZE = 2
        payload = {'items': [_item(f"https://example.com/{i}") for i in range(3)]}
        response = api_key_client.post('/api/v1/retirement/analyze/', payload, format='json')

        assert response.status_code == 413
        assert response.data['error']['code'] == 'BATCH_TOO_LARGE'

    def test_configured_weights_apply(self, api_key_client, settings):
        settings.PRUNEPRO_SCORE_WEIGHTS = {
            'traffic': 1, 'rank': 1, 'engagement': 1, 'freshness': 1, 'cannibal': 1, 'no_value': 1,
        }
        payload = {'items': [_item('https://example.com/a')]}
        response = api_key_client.post('/api/v1/retirement/analyze/', payload, format='json')

        assert response.data['data']['decisions'][0]['zombie_score'] == 100


class TestSimulate:

    def test_one_of_each_action(self, api_key_client):
        payload = {
            'actions': [
                {'url': f"https://example.com/{action}", 'action': action, 'risk': 10, 'metrics': {}}
                for action in ('keep', 'refresh', 'consolidate', 'prune', 'redirect')
            ],
        }
        response = api_key_client.post('/api/v1/retirement/simulate/', payload, format='json')

        assert response.status_code == 200
        simulation = response.data['data']['simulation']
        assert simulation['projected_impact']['index_bloat_reduction'] == 60
        assert simulation['actions_to_apply'] == 4

    def test_unknown_action(self, api_key_client):
        payload = {'actions': [{'url': 'https://example.com/a', 'action': 'delete', 'risk': 10, 'metrics': {}}]}
        response = api_key_client.post('/api/v1/retirement/simulate/', payload, format='json')

        assert response.status_code == 400


class TestClusters:

    def test_clusters_with_report(self, api_key_client):
        body = 'how to choose dance shoes for ballroom salsa and tango'
        payload = {
            'documents': [
                {'url': 'https://example.com/guides/dance-shoes', 'title': 'Dance Shoes', 'body': body},
                {'url': 'https://example.com/blog/dance-shoes', 'title': 'Dance Shoes', 'body': body},
            ],
        }
        response = api_key_client.post('/api/v1/retirement/clusters/', payload, format='json')

        assert response.status_code == 200
        clusters = response.data['data']['clusters']
        assert len(clusters) == 1
        assert clusters[0]['canonical_url'] == 'https://example.com/blog/dance-shoes'
        assert response.data['data']['report'].startswith('Found 1 cannibalization clusters:')

    def test_html_documents(self, api_key_client):
        html = '<h1>Dance Shoes</h1><p>how to choose dance shoes for ballroom salsa and tango</p>'
        payload = {
            'documents': [
                {'url': 'https://example.com/guides/dance-shoes', 'html': html},
                {'url': 'https://example.com/blog/dance-shoes', 'html': html},
            ],
        }
        response = api_key_client.post('/api/v1/retirement/clusters/', payload, format='json')

        assert response.status_code == 200
        assert len(response.data['data']['clusters']) == 1

    def test_document_needs_url(self, api_key_client):
        payload = {'documents': [{'title': 'No address'}]}
        response = api_key_client.post('/api/v1/retirement/clusters/', payload, format='json')

        assert response.status_code == 400


class TestActionPlan:

    def test_csv_download(self, api_key_client):
        payload = {
            'items': [
                _item('https://example.com/guide', backlinks=3),
                _item('https://example.com/blog/old-post', age_months=40),
            ],
        }
        response = api_key_client.post('/api/v1/retirement/action-plan/', payload, format='json')

        assert response.status_code == 200
        assert response['Content-Type'].startswith('text/csv')
        assert 'attachment' in response['Content-Disposition']

        rows = list(csv.reader(io.StringIO(response.content.decode())))
        assert rows[0][0] == 'Source URL'
        assert [row[0] for row in rows[1:]] == ['https://example.com/blog/old-post']
        assert rows[1][1] == 'redirect'


class TestSerializers:

    def test_ctr_derived_from_clicks(self):
        serializer = ContentMetricsSerializer(data={'clicks': 5, 'impressions': 100})
        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['ctr'] == 0.05

    def test_ctr_without_impressions(self):
        serializer = ContentMetricsSerializer(data={'clicks': 5})
        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['ctr'] == 0.0

    def test_age_from_last_updated(self):
        serializer = ContentMetricsSerializer(data={'last_updated': '2000-01-01T00:00:00Z'})
        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['age_months'] > 24

    def test_explicit_age_wins(self):
        serializer = ContentMetricsSerializer(data={'age_months': 3, 'last_updated': '2000-01-01T00:00:00Z'})
        assert serializer.is_valid(), serializer.errors
        assert serializer.validated_data['age_months'] == 3

    def test_months_since(self):
        assert months_since(datetime(2024, 1, 15), now=datetime(2024, 3, 10)) == 1
        assert months_since(datetime(2024, 1, 15), now=datetime(2024, 3, 15)) == 2
        assert months_since(datetime(2030, 1, 1), now=datetime(2024, 1, 1)) == 0

    def test_request_weights_override_defaults(self):
        weights = build_weights({'rank': 0.5}, defaults={'rank': 0.1, 'traffic': 0.4})
        assert weights.rank == 0.5
        assert weights.traffic == 0.4
        assert weights.freshness == 0.15
