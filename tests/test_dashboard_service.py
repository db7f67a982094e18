import pytest

from galeguia.services.dashboard_service import CourseDashboard, DashboardState
from galeguia.services.storage_service import UploadedFile
from galeguia.utils.result_utils import NOT_AUTHENTICATED


@pytest.fixture
def dashboard(fake):
    return CourseDashboard(fake, secure_reads=True)


def test_state_reset():
    state = DashboardState(current_user={'id': 'u'}, is_admin=True, current_course_id='c',
                           user_courses=[{'id': 'c'}], current_course_modules=[{'id': 'm'}])

    state.reset()

    assert state == DashboardState()
    assert state.user_id is None


def test_auth_events_drive_state(fake, dashboard):
    user = fake.auth.add_account('someone@example.com', 'pw')
    dashboard.bind_auth()

    fake.auth.login_as(user)
    assert dashboard.state.user_id == user.id

    dashboard.state.current_course_id = 'c'
    fake.auth.sign_out()
    assert dashboard.state == DashboardState()


def test_check_session(fake, dashboard):
    assert dashboard.check_session() == {'success': True, 'authenticated': False}

    user = fake.auth.add_account('someone@example.com', 'pw')
    fake.auth.login_as(user)
    result = dashboard.check_session()

    assert result['authenticated'] is True
    assert result['user']['id'] == user.id


def test_load_courses_requires_user(dashboard):
    assert dashboard.load_user_courses() == {'success': False, 'error': NOT_AUTHENTICATED}


def test_load_courses_for_author(fake, dashboard, owner, course):
    fake.add('courses', {'title': 'Foreign draft', 'is_published': False, 'created_by': 'x'})
    fake.add('modules', {'course_id': course['id'], 'title': 'M1', 'order': 1})
    fake.add('modules', {'course_id': course['id'], 'title': 'M2', 'order': 2})

    result = dashboard.load_user_courses()

    assert result['is_admin'] is False
    assert [c['id'] for c in result['courses']] == [course['id']]
    assert result['courses'][0]['modules'] == [{'count': 2}]
    assert 'creator' not in result['courses'][0]
    assert dashboard.state.user_courses == result['courses']
    assert fake.rpc_calls[0] == ('get_user_accessible_courses', {'p_user_id': owner.id})


def test_load_courses_for_admin_adds_creators(fake, dashboard, course, admin):
    draft = fake.add('courses', {'title': 'Foreign draft', 'is_published': False, 'created_by': 'x'})

    result = dashboard.load_user_courses()

    assert result['is_admin'] is True
    by_id = {c['id']: c for c in result['courses']}
    assert set(by_id) == {course['id'], draft['id']}
    assert by_id[course['id']]['creator']['username'] == 'owner'
    assert by_id[draft['id']]['creator'] is None
    assert by_id[draft['id']]['modules'] == [{'count': 0}]


def test_plain_reads_use_tables(fake, owner, course):
    dashboard = CourseDashboard(fake, secure_reads=False)

    result = dashboard.load_user_courses()

    assert [c['id'] for c in result['courses']] == [course['id']]
    assert fake.rpc_calls == []


def test_open_course_loads_sorted_content(fake, dashboard, owner, course):
    module = fake.add('modules', {'course_id': course['id'], 'title': 'M', 'order': 1})
    fake.add('lessons', {'module_id': module['id'], 'title': 'Second', 'order': 2})
    fake.add('lessons', {'module_id': module['id'], 'title': 'First', 'order': 1})

    result = dashboard.open_course(course['id'])

    assert result['course']['id'] == course['id']
    assert 'creator' not in result['course']
    assert [l['title'] for l in result['modules'][0]['lessons']] == ['First', 'Second']
    assert dashboard.state.current_course_id == course['id']
    assert dashboard.state.current_course_modules == result['modules']


def test_open_course_as_admin_shows_creator(fake, dashboard, course, admin):
    result = dashboard.open_course(course['id'])

    assert result['course']['creator']['username'] == 'owner'


def test_open_course_plain_reads(fake, owner, course):
    module = fake.add('modules', {'course_id': course['id'], 'title': 'M', 'order': 1})
    fake.add('lessons', {'module_id': module['id'], 'title': 'L', 'order': 1})

    result = CourseDashboard(fake, secure_reads=False).open_course(course['id'])

    assert 'modules' not in result['course']
    assert [l['title'] for l in result['modules'][0]['lessons']] == ['L']


def test_open_hidden_course(fake, dashboard, owner):
    draft = fake.add('courses', {'title': 'Foreign draft', 'is_published': False, 'created_by': 'x'})

    result = dashboard.open_course(draft['id'])

    assert result['status'] == 404
    assert dashboard.state.current_course_id is None


def test_save_new_course_with_cover(fake, dashboard, owner):
    cover = UploadedFile(content=b'png', filename='cover.png', content_type='image/png')

    result = dashboard.save_course('New course', 'desc', False, cover=cover)

    assert result['success'] is True
    course = result['course']
    assert course['created_by'] == owner.id
    assert course['cover_image_url'].endswith('_cover.png')
    assert fake.rpc_calls[0][0] == 'create_course_secure'
    assert dashboard.state.current_course_id == course['id']
    assert [c['id'] for c in dashboard.state.user_courses] == [course['id']]


def test_save_course_without_secure_rpc(fake, owner):
    dashboard = CourseDashboard(fake, secure_reads=False)

    result = dashboard.save_course('Plain')

    assert result['course']['is_published'] is False
    assert ('courses', 'insert') in fake.calls


def test_save_updates_open_course(fake, dashboard, owner, course):
    dashboard.open_course(course['id'])

    result = dashboard.save_course('Renamed', 'new', True)

    assert result['course']['id'] == course['id']
    assert fake.rows('courses', id=course['id'])[0]['title'] == 'Renamed'
    assert len(fake.rows('courses')) == 1


def test_save_course_cover_failure(fake, dashboard, owner):
    fake.storage.fail_upload = 'The resource was not found'

    result = dashboard.save_course('New', cover=UploadedFile(b'x', 'a.png'))

    assert result['success'] is False


def test_save_course_signed_out(dashboard):
    assert dashboard.save_course('x')['error'] == NOT_AUTHENTICATED


def test_delete_course_flow(fake, dashboard, owner, course):
    assert dashboard.delete_course()['status'] == 400

    dashboard.open_course(course['id'])
    result = dashboard.delete_course()

    assert result == {'success': True}
    assert dashboard.state.current_course_id is None
    assert dashboard.state.user_courses == []
    assert fake.rows('courses') == []


def test_module_and_lesson_flow(fake, dashboard, owner, course):
    assert dashboard.save_module('Orphan')['status'] == 400

    dashboard.open_course(course['id'])
    module = dashboard.save_module('Intro')['module']
    renamed = dashboard.save_module('Intro 2', module_id=module['id'])
    text = dashboard.save_lesson(module['id'], 'Read me', 'text', content='Ola mundo')['lesson']
    video = dashboard.save_lesson(
        module['id'], 'Watch me', 'video', content='ignored',
        video=UploadedFile(b'mp4', 'clip.mp4', 'video/mp4')
    )['lesson']

    assert renamed['module']['title'] == 'Intro 2'
    assert text['content'] == 'Ola mundo'
    assert video['type'] == 'video'
    assert video['content'] is None
    assert video['video_url'].endswith('_clip.mp4')
    lessons = dashboard.state.current_course_modules[0]['lessons']
    assert [l['title'] for l in lessons] == ['Read me', 'Watch me']

    dashboard.delete_lesson(text['id'])
    assert [l['title'] for l in dashboard.state.current_course_modules[0]['lessons']] == ['Watch me']

    dashboard.delete_module(module['id'])
    assert dashboard.state.current_course_modules == []
    assert fake.rows('lessons') == []


def test_video_lesson_without_file_skips_upload(fake, dashboard, owner, course):
    dashboard.open_course(course['id'])
    module = dashboard.save_module('Intro')['module']

    result = dashboard.save_lesson(module['id'], 'Later', 'video')

    assert result['success'] is True
    assert fake.storage.uploads == []


def test_save_lesson_rejects_unknown_type(fake, dashboard, owner):
    result = dashboard.save_lesson('m', 'Quiz', 'quiz')

    assert result['status'] == 400
