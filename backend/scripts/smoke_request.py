"""Run a quick register/fetch/delete round against the app in-process.

Uses FastAPI's TestClient, so no server needs to be running. Point
`DATABASE_URL` at a scratch database before running this script.
"""

import sys
import os

# Ensure backend folder is on sys.path so `student_portal` can be imported
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from fastapi.testclient import TestClient
from student_portal.main import app


def run():
    client = TestClient(app)
    print('HEALTH:', client.get('/health').json())
    payload = {
        'name': 'Smoke Test',
        'studentClass': 'SMOKE',
        'age': 1,
        'addresses': [{'flatNo': '1', 'city': 'Nowhere', 'state': 'NA'}],
    }
    created = client.post('/student/register', json=payload)
    print('REGISTER:', created.status_code, created.json())
    student_id = created.json()['response']['id']
    fetched = client.get(f'/student/{student_id}')
    print('GET:', fetched.status_code, fetched.json())
    deleted = client.delete(f'/student/{student_id}')
    print('DELETE:', deleted.status_code, deleted.json())


if __name__ == '__main__':
    run()
