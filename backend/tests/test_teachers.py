from fastapi.testclient import TestClient

from school_api.main import app

client = TestClient(app)


def _teacher(name='Mr. Lim', department='Math'):
    r = client.post('/teachers', json={'name': name, 'department': department})
    assert r.status_code == 201
    return r.json()


def test_create_teacher():
    t = _teacher()
    assert t['name'] == 'Mr. Lim'
    assert t['department'] == 'Math'
    assert isinstance(t['id'], int)


def test_create_teacher_requires_department():
    r = client.post('/teachers', json={'name': 'Mr. Lim'})
    assert r.status_code == 400
    assert any(issue['field'] == 'department' for issue in r.json()['errors'])


def test_get_teacher_with_courses():
    t = _teacher()
    client.post('/courses', json={'title': 'Algebra', 'description': 'Intro', 'TeacherId': t['id']})
    client.post('/courses', json={'title': 'Calculus', 'description': 'Limits', 'TeacherId': t['id']})
    r = client.get(f"/teachers/{t['id']}", params={'populate': 'courses'})
    assert r.status_code == 200
    assert sorted(c['title'] for c in r.json()['courses']) == ['Algebra', 'Calculus']

    plain = client.get(f"/teachers/{t['id']}").json()
    assert 'courses' not in plain


def test_list_teachers_sorting():
    first = _teacher(name='A')
    second = _teacher(name='B')
    asc = client.get('/teachers', params={'sort': 'asc'}).json()
    desc = client.get('/teachers', params={'sort': 'desc'}).json()
    assert [t['id'] for t in asc['data']] == [first['id'], second['id']]
    assert [t['id'] for t in desc['data']] == [second['id'], first['id']]
    assert asc['meta']['sort'] == 'asc'
    assert desc['meta']['sort'] == 'desc'


def test_list_teachers_empty():
    body = client.get('/teachers', params={'populate': 'courses'}).json()
    assert body == {
        'meta': {'totalItems': 0, 'page': 1, 'totalPages': 0, 'limit': 10, 'sort': 'desc'},
        'data': [],
    }


def test_update_and_delete_teacher():
    t = _teacher()
    r = client.put(f"/teachers/{t['id']}", json={'department': 'Physics'})
    assert r.status_code == 200
    assert r.json()['name'] == 'Mr. Lim'
    assert r.json()['department'] == 'Physics'

    assert client.delete(f"/teachers/{t['id']}").json() == {'message': 'Deleted'}
    assert client.get(f"/teachers/{t['id']}").status_code == 404
