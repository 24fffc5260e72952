import pytest
from rest_framework import status
from rest_framework.test import APIClient

BASE_URL = '/api/v1/templates'


@pytest.fixture
def api_client():
    return APIClient()


class TestTemplateEndpoints:
    """Tests for the product template API."""

    def test_list(self, api_client):
        response = api_client.get(f'{BASE_URL}/')

        assert response.status_code == status.HTTP_200_OK
        by_name = {template['name']: template for template in response.json()}
        assert set(by_name) == {'ThinkPad X1 Carbon Gen12', 'ThinkPad T14 Gen3', 'Legion Slim 7 Gen8'}
        flagship = by_name['ThinkPad X1 Carbon Gen12']
        assert flagship['primaryCount'] == 7
        assert flagship['totalCost'] == 8393
        assert 'structure' not in flagship

    def test_retrieve(self, api_client):
        response = api_client.get(f'{BASE_URL}/ThinkPad%20T14%20Gen3/')

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data['version'] == 'v1.0'
        assert data['structure'][0]['key'] == 't14g3'
        assert data['structure'][0]['level'] == 0

    def test_retrieve_unknown(self, api_client):
        response = api_client.get(f'{BASE_URL}/Unknown/')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_candidates(self, api_client):
        response = api_client.get(f'{BASE_URL}/candidates/', {'partId': 'MEM-X'})

        assert response.status_code == status.HTTP_200_OK
        part_ids = [part['partId'] for part in response.json()]
        assert 'MEM-LPDDR5-16GB' in part_ids
        assert 'MEM-DDR4-8GB' in part_ids
        assert all(part['category'] == 'MEM' for part in response.json())

    def test_candidates_need_part_id(self, api_client):
        response = api_client.get(f'{BASE_URL}/candidates/')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
