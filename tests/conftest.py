import pytest

from galeguia import create_app
from tests.fakes import FakeSupabase, enroll_user_function


def _is_admin(db, user_id):
    profiles = db.rows('profiles', id=user_id)
    return bool(profiles and profiles[0].get('is_admin'))


def _can_see(db, course, user_id):
    return course.get('is_published') or course.get('created_by') == user_id or _is_admin(db, user_id)


def accessible_courses(db, p_user_id):
    courses = [dict(c) for c in db.tables.get('courses', []) if _can_see(db, c, p_user_id)]
    return sorted(courses, key=lambda c: c['created_at'], reverse=True)


def course_by_id(db, p_course_id, p_user_id):
    return [dict(c) for c in db.rows('courses', id=p_course_id) if _can_see(db, c, p_user_id)]


def course_modules(db, p_course_id, p_user_id):
    if not course_by_id(db, p_course_id, p_user_id):
        return []
    return [dict(m) for m in db.rows('modules', course_id=p_course_id)]


def module_lessons(db, p_module_id, p_user_id):
    modules = db.rows('modules', id=p_module_id)
    if not modules or not course_by_id(db, modules[0]['course_id'], p_user_id):
        return []
    return [dict(l) for l in db.rows('lessons', module_id=p_module_id)]


def create_course_secure(db, p_title, p_description, p_is_published, p_creator_id):
    return [dict(db.add('courses', {
        'title': p_title,
        'description': p_description,
        'is_published': p_is_published,
        'created_by': p_creator_id
    }))]


def _course_lessons(db, course_id):
    module_ids = {m['id'] for m in db.rows('modules', course_id=course_id)}
    return [l for l in db.tables.get('lessons', []) if l['module_id'] in module_ids]


def course_completion(db, course_uuid, user_uuid):
    lessons = _course_lessons(db, course_uuid)
    if not lessons:
        return None
    done = [l for l in lessons if db.rows('progress', user_id=user_uuid, lesson_id=l['id'], completed=True)]
    return round(100.0 * len(done) / len(lessons), 2)


def next_lesson(db, p_user_id, p_course_id):
    modules = sorted(db.rows('modules', course_id=p_course_id), key=lambda m: m['order'])
    for module in modules:
        for lesson in sorted(db.rows('lessons', module_id=module['id']), key=lambda l: l['order']):
            if not db.rows('progress', user_id=p_user_id, lesson_id=lesson['id'], completed=True):
                return [{'lesson_id': lesson['id'], 'title': lesson['title'], 'module_id': module['id']}]
    return []


def courses_with_progress(db, p_user_id):
    result = []
    for enrollment in db.rows('enrollments', user_id=p_user_id):
        course = db.rows('courses', id=enrollment['course_id'])[0]
        result.append({
            'course_id': course['id'],
            'title': course['title'],
            'completion': course_completion(db, course['id'], p_user_id) or 0
        })
    return result


@pytest.fixture
def fake():
    db = FakeSupabase()
    db.rpc_handlers.update({
        'get_user_accessible_courses': accessible_courses,
        'get_course_by_id': course_by_id,
        'get_course_modules': course_modules,
        'get_module_lessons': module_lessons,
        'create_course_secure': create_course_secure,
        'get_course_completion': course_completion,
        'get_next_lesson_for_user': next_lesson,
        'get_user_courses_with_progress': courses_with_progress,
    })
    db.functions.handlers['enroll-user'] = enroll_user_function
    return db


@pytest.fixture
def owner(fake):
    """A regular (non-admin) course author, signed in."""
    user = fake.auth.add_account('owner@example.com', 'secret-pass', username='owner', full_name='Olga Owner')
    fake.auth.login_as(user)
    return user


@pytest.fixture
def admin(fake):
    """An admin account, signed in."""
    user = fake.auth.add_account('admin@example.com', 'admin-pass', is_admin=True, username='root')
    fake.auth.login_as(user)
    return user


@pytest.fixture
def course(fake, owner):
    return fake.add('courses', {
        'title': 'Galician for beginners',
        'description': 'Basics',
        'is_published': True,
        'created_by': owner.id
    })


@pytest.fixture
def app(fake):
    app = create_app(client_factory=lambda access_token, refresh_token: fake)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
