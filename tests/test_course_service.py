from galeguia.services.course_service import CourseService, attach_lessons
from galeguia.utils.result_utils import NOT_AUTHENTICATED


def test_create_course_sets_owner_and_unpublished(fake, owner):
    result = CourseService(fake).create_course({'title': 'Verbs', 'description': 'All of them'})

    assert result['success'] is True
    course = result['course']
    assert course['created_by'] == owner.id
    assert course['is_published'] is False
    assert fake.rows('courses', id=course['id'])


def test_create_course_cannot_spoof_owner(fake, owner):
    result = CourseService(fake).create_course({'title': 'Verbs', 'created_by': 'someone-else'})

    assert result['course']['created_by'] == owner.id


def test_create_course_requires_title(fake, owner):
    result = CourseService(fake).create_course({'description': 'no title'})

    assert result == {'success': False, 'error': 'Course title is required', 'status': 400}


def test_create_course_requires_user(fake):
    assert CourseService(fake).create_course({'title': 'x'}) == {'success': False, 'error': NOT_AUTHENTICATED}


def test_create_course_surfaces_backend_error(fake, owner):
    fake.fail_next('courses', 'insert', 'new row violates row-level security policy for table "courses"')

    result = CourseService(fake).create_course({'title': 'x'})

    assert result['success'] is False
    assert 'row-level security' in result['error']


def test_create_course_secure_calls_remote_function(fake, owner):
    result = CourseService(fake).create_course_secure('Secure', 'desc', True)

    assert result['success'] is True
    assert result['course']['created_by'] == owner.id
    assert fake.rpc_calls[-1] == ('create_course_secure', {
        'p_title': 'Secure',
        'p_description': 'desc',
        'p_is_published': True,
        'p_creator_id': owner.id
    })


def test_update_course_refreshes_timestamp(fake, course):
    result = CourseService(fake).update_course(course['id'], {'title': 'Renamed', 'created_by': 'x'})

    assert result['course']['title'] == 'Renamed'
    assert result['course']['created_by'] == course['created_by']
    assert 'updated_at' in result['course']


def test_toggle_published(fake, course):
    result = CourseService(fake).toggle_course_published(course['id'], False)

    assert result['course']['is_published'] is False


def test_published_courses_only(fake, owner, course):
    fake.add('courses', {'title': 'Draft', 'is_published': False, 'created_by': owner.id})

    result = CourseService(fake).get_published_courses()

    assert [c['id'] for c in result['courses']] == [course['id']]


def test_created_courses_are_filtered_by_owner(fake, owner, course):
    fake.add('courses', {'title': 'Foreign', 'created_by': 'another-user'})

    result = CourseService(fake).get_created_courses()

    assert [c['id'] for c in result['courses']] == [course['id']]


def test_course_with_content_nests_sorted_lessons(fake, course):
    second = fake.add('modules', {'course_id': course['id'], 'title': 'Two', 'order': 2})
    first = fake.add('modules', {'course_id': course['id'], 'title': 'One', 'order': 1})
    fake.add('lessons', {'module_id': first['id'], 'title': 'b', 'order': 2})
    fake.add('lessons', {'module_id': first['id'], 'title': 'a', 'order': 1})
    fake.add('lessons', {'module_id': second['id'], 'title': 'c', 'order': 1})

    result = CourseService(fake).get_course_with_content(course['id'])

    modules = result['course']['modules']
    assert [m['title'] for m in modules] == ['One', 'Two']
    assert [l['title'] for l in modules[0]['lessons']] == ['a', 'b']
    assert [l['title'] for l in modules[1]['lessons']] == ['c']


def test_course_with_content_without_modules(fake, course):
    result = CourseService(fake).get_course_with_content(course['id'])

    assert result['course']['modules'] == []
    assert ('lessons', 'select') not in fake.calls


def test_course_with_content_unknown_course(fake):
    result = CourseService(fake).get_course_with_content('missing')

    assert result['success'] is False
    assert result['error']


def test_delete_course_cascades_in_backend(fake, course):
    module = fake.add('modules', {'course_id': course['id'], 'title': 'M', 'order': 1})
    fake.add('lessons', {'module_id': module['id'], 'title': 'L', 'order': 1})

    assert CourseService(fake).delete_course(course['id']) == {'success': True}
    assert fake.rows('courses') == []
    assert fake.rows('modules') == []
    assert fake.rows('lessons') == []


def test_accessible_courses_hide_foreign_drafts(fake, owner, course):
    fake.add('courses', {'title': 'Foreign draft', 'is_published': False, 'created_by': 'x'})
    mine = fake.add('courses', {'title': 'My draft', 'is_published': False, 'created_by': owner.id})

    result = CourseService(fake).get_accessible_courses(owner.id)

    assert {c['id'] for c in result['courses']} == {course['id'], mine['id']}


def test_course_by_id_not_visible(fake, owner):
    draft = fake.add('courses', {'title': 'Foreign draft', 'is_published': False, 'created_by': 'x'})

    result = CourseService(fake).get_course_by_id(draft['id'], owner.id)

    assert result == {'success': False, 'error': 'Course not found', 'status': 404}


def test_course_modules_and_lessons_via_rpc(fake, owner, course):
    module = fake.add('modules', {'course_id': course['id'], 'title': 'M', 'order': 1})
    fake.add('lessons', {'module_id': module['id'], 'title': 'L2', 'order': 2})
    fake.add('lessons', {'module_id': module['id'], 'title': 'L1', 'order': 1})
    service = CourseService(fake)

    modules = service.get_course_modules(course['id'], owner.id)
    lessons = service.get_module_lessons(module['id'], owner.id)

    assert [m['id'] for m in modules['modules']] == [module['id']]
    assert [l['title'] for l in lessons['lessons']] == ['L1', 'L2']


def test_rpc_failure_is_reported(fake, owner):
    del fake.rpc_handlers['get_user_accessible_courses']

    result = CourseService(fake).get_accessible_courses(owner.id)

    assert result['success'] is False
    assert 'function' in result['error']


def test_attach_lessons_keeps_inputs_untouched():
    modules = [{'id': 'm', 'order': 1}]
    nested = attach_lessons(modules, [{'id': 'l', 'module_id': 'm', 'order': 1}])

    assert nested[0]['lessons'][0]['id'] == 'l'
    assert 'lessons' not in modules[0]
