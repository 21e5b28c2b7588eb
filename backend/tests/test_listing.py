import pytest

from school_api.utils.listing import ListQuery, parse_populate, parse_positive_int, parse_sort

COURSE_LOADABLE = {'teacher': 'teacher', 'student': 'students'}


def test_defaults_when_params_absent():
    q = ListQuery.from_params(COURSE_LOADABLE)
    assert (q.page, q.limit, q.sort, q.relations) == (1, 10, 'desc', frozenset())
    assert q.offset == 0


@pytest.mark.parametrize('raw', ['abc', '', '0', '-3', '1.5', str(2 ** 63), '9' * 20])
def test_unusable_page_and_limit_fall_back(raw):
    assert parse_positive_int(raw, 1) == 1
    assert parse_positive_int(raw, 10) == 10


def test_offset_follows_page_and_limit():
    q = ListQuery.from_params(COURSE_LOADABLE, page='3', limit='7')
    assert q.offset == 14


def test_sort_normalizes_direction():
    assert parse_sort('asc') == 'asc'
    assert parse_sort(' ASC ') == 'asc'
    assert parse_sort('desc') == 'desc'
    assert parse_sort('sideways') == 'desc'
    assert parse_sort(None) == 'desc'


def test_populate_intersects_capability_table():
    assert parse_populate('teacher, Student', COURSE_LOADABLE) == {'teacher', 'students'}
    assert parse_populate('foo,bar', COURSE_LOADABLE) == frozenset()
    assert parse_populate('courses', COURSE_LOADABLE) == frozenset()
    assert parse_populate(None, COURSE_LOADABLE) == frozenset()


@pytest.mark.parametrize('total,limit,pages', [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (25, 4, 7)])
def test_total_pages_is_ceiling(total, limit, pages):
    q = ListQuery(limit=limit)
    assert q.total_pages(total) == pages


def test_envelope_shape():
    q = ListQuery.from_params(COURSE_LOADABLE, page='2', limit='5', sort='asc')
    env = q.envelope(12, iter([{'id': 1}]))
    assert env == {
        'meta': {'totalItems': 12, 'page': 2, 'totalPages': 3, 'limit': 5, 'sort': 'asc'},
        'data': [{'id': 1}],
    }


def test_largest_database_integer_is_accepted():
    assert parse_positive_int(str(2 ** 63 - 1), 10) == 2 ** 63 - 1
