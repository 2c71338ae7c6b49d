from urllib.parse import parse_qs, urlparse

from tutorial_app.extensions import db
from tutorial_app.models import Tutorial
from tutorial_app.utils.model_utils import tutorial_utils


class TestTutorialWorkflow:
    """End-to-end flows through the HTTP routes against the test database."""

    def test_create_tutorial_flow(self, client, flashes):
        assert tutorial_utils.count_tutorials() == 0

        response = client.post('/tutorials/save', data={
            'title': 'Integration Test Tutorial',
            'description': 'Testing full workflow',
            'level': '5',
            'published': 'true',
        })

        assert response.status_code == 302
        assert flashes() == ['The Tutorial has been saved successfully!']
        tutorials = tutorial_utils.list_tutorials()
        assert len(tutorials) == 1
        assert tutorials[0].title == 'Integration Test Tutorial'
        assert tutorials[0].description == 'Testing full workflow'
        assert tutorials[0].level == 5
        assert tutorials[0].published is True

    def test_view_tutorial_list(self, client, create_tutorial):
        create_tutorial(title='First Tutorial')
        create_tutorial(title='Second Tutorial')

        response = client.get('/tutorials')

        assert response.status_code == 200
        assert b'First Tutorial' in response.data
        assert b'Second Tutorial' in response.data
        assert tutorial_utils.count_tutorials() == 2

    def test_flash_is_shown_once_after_redirect(self, client):
        response = client.post('/tutorials/save', data={'title': 'Shown', 'level': '1'}, follow_redirects=True)
        assert b'The Tutorial has been saved successfully!' in response.data

        response = client.get('/tutorials')
        assert b'The Tutorial has been saved successfully!' not in response.data

    def test_edit_tutorial_flow(self, client, create_tutorial):
        tutorial = create_tutorial(title='Original Title', description='Original Description', level=3, published=True)
        tutorial_id = tutorial.id

        form_page = client.get(f'/tutorials/{tutorial_id}')
        assert b'Original Title' in form_page.data

        client.post('/tutorials/save', data={
            'id': str(tutorial_id),
            'title': 'Updated Title',
            'description': 'Updated Description',
            'level': '8',
        })

        updated = tutorial_utils.get_tutorial_by_id(tutorial_id)
        assert updated.title == 'Updated Title'
        assert updated.description == 'Updated Description'
        assert updated.level == 8
        assert updated.published is False
        assert tutorial_utils.count_tutorials() == 1

    def test_edit_clears_description(self, client, create_tutorial):
        tutorial = create_tutorial(description='Soon gone')

        client.post('/tutorials/save', data={
            'id': str(tutorial.id),
            'title': tutorial.title,
            'description': '',
            'level': '1',
            'published': 'true',
        })

        assert tutorial_utils.get_tutorial_by_id(tutorial.id).description is None

    def test_rejected_edit_leaves_row_untouched(self, client, create_tutorial):
        tutorial = create_tutorial(title='Keep', level=4)

        response = client.post('/tutorials/save', data={'id': str(tutorial.id), 'title': 'Changed', 'level': '42'})

        assert 'message' in parse_qs(urlparse(response.headers['Location']).query)
        db.session.expire_all()
        stored = tutorial_utils.get_tutorial_by_id(tutorial.id)
        assert (stored.title, stored.level) == ('Keep', 4)

    def test_delete_tutorial_flow(self, client, create_tutorial, flashes):
        tutorial = create_tutorial()
        tutorial_id = tutorial.id
        assert tutorial_utils.tutorial_exists(tutorial_id)

        response = client.get(f'/tutorials/delete/{tutorial_id}')

        assert response.status_code == 302
        assert flashes() == [f'The Tutorial with id={tutorial_id} has been deleted successfully!']
        assert not tutorial_utils.tutorial_exists(tutorial_id)
        assert tutorial_utils.count_tutorials() == 0

    def test_delete_missing_tutorial_is_not_an_error(self, client, flashes):
        response = client.get('/tutorials/delete/404')
        assert response.status_code == 302
        assert flashes() == ['The Tutorial with id=404 has been deleted successfully!']

    def test_search_tutorials_flow(self, client, create_tutorial):
        create_tutorial(title='Spring Boot Tutorial')
        create_tutorial(title='Spring Data JPA')
        create_tutorial(title='Django Basics')

        response = client.get('/tutorials?keyword=Spring')

        assert response.status_code == 200
        assert b'Spring Boot Tutorial' in response.data
        assert b'Spring Data JPA' in response.data
        assert b'Django Basics' not in response.data

    def test_case_insensitive_search(self, client, create_tutorial):
        create_tutorial(title='Spring Boot')
        create_tutorial(title='SPRING DATA')
        create_tutorial(title='spring framework')

        response = client.get('/tutorials?keyword=sPrInG')

        for title in (b'Spring Boot', b'SPRING DATA', b'spring framework'):
            assert title in response.data

    def test_search_with_no_results(self, client, create_tutorial):
        create_tutorial(title='Flask')
        response = client.get('/tutorials?keyword=Nonexistent')
        assert b'No tutorials found!' in response.data

    def test_empty_tutorial_list(self, client):
        response = client.get('/tutorials')
        assert response.status_code == 200
        assert b'No tutorials found!' in response.data

    def test_toggle_published_status_flow(self, client, create_tutorial, flashes):
        tutorial = create_tutorial(published=False)
        tutorial_id = tutorial.id

        client.get(f'/tutorials/{tutorial_id}/published/true')
        assert flashes() == [f'The Tutorial id={tutorial_id} has been published']
        assert tutorial_utils.get_tutorial_by_id(tutorial_id).published is True

        client.get('/tutorials')  # consume the flash
        client.get(f'/tutorials/{tutorial_id}/published/false')
        assert flashes() == [f'The Tutorial id={tutorial_id} has been disabled']
        assert tutorial_utils.get_tutorial_by_id(tutorial_id).published is False

    def test_toggle_missing_tutorial_is_not_an_error(self, client, flashes):
        response = client.get('/tutorials/77/published/true')
        assert response.status_code == 302
        assert flashes() == ['The Tutorial id=77 has been published']
        assert tutorial_utils.count_tutorials() == 0

    def test_edit_missing_tutorial(self, client, flashes):
        response = client.get('/tutorials/12')
        assert response.status_code == 302
        assert flashes() == ['Tutorial with id=12 was not found']

    def test_multiple_crud_operations(self, client):
        client.post('/tutorials/save', data={'title': 'Tutorial 1', 'description': 'Description 1', 'level': '1', 'published': 'true'})
        assert tutorial_utils.count_tutorials() == 1
        tutorial_id = tutorial_utils.list_tutorials()[0].id

        client.post('/tutorials/save', data={'id': str(tutorial_id), 'title': 'Updated Title', 'level': '2', 'published': 'true'})
        assert tutorial_utils.get_tutorial_by_id(tutorial_id).title == 'Updated Title'

        client.get(f'/tutorials/delete/{tutorial_id}')
        assert tutorial_utils.count_tutorials() == 0

    def test_save_after_row_was_deleted_recreates_it(self, client, create_tutorial):
        tutorial = create_tutorial(title='Ghost')
        tutorial_id = tutorial.id
        tutorial_utils.delete_tutorial_by_id(tutorial_id)

        client.post('/tutorials/save', data={'id': str(tutorial_id), 'title': 'Back', 'level': '2'})

        restored = db.session.get(Tutorial, tutorial_id)
        assert restored is not None
        assert restored.title == 'Back'
