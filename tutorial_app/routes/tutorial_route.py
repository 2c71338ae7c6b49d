from flask import Blueprint, abort, flash, redirect, render_template, request, url_for
from marshmallow import ValidationError

from tutorial_app.extensions import db
from tutorial_app.models.Tutorial import Tutorial
from tutorial_app.schemas.tutorial_schema import TutorialSchema, format_validation_error
from tutorial_app.utils.logging_utils import get_logger, log_context
from tutorial_app.utils.model_utils import tutorial_utils

tutorial_bp = Blueprint('tutorial_bp', __name__)

tutorial_schema = TutorialSchema()

_TRUE_VALUES = {'true', '1', 'yes', 'on'}
_FALSE_VALUES = {'false', '0', 'no', 'off'}


def _parse_status(raw):
    value = (raw or '').strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    abort(400, description=f"Invalid published status '{raw}'")


def _list_url(**params):
    return url_for('tutorial_bp.list_tutorials', **params)


@tutorial_bp.route('/')
def index():
    return redirect(_list_url())


@tutorial_bp.route('/tutorials')
def list_tutorials():
    """List every tutorial, or only those whose title matches ``keyword``."""
    keyword = request.args.get('keyword')
    message = request.args.get('message')
    try:
        if keyword:
            tutorials = tutorial_utils.search_tutorials_by_title(keyword)
        else:
            tutorials = tutorial_utils.list_tutorials()
    except Exception as e:
        get_logger("route").exception("Error listing tutorials keyword=%r", keyword)
        tutorials = []
        message = str(e)
    return render_template('tutorials.html', tutorials=tutorials, keyword=keyword, message=message)


@tutorial_bp.route('/tutorials/new')
def new_tutorial():
    tutorial = Tutorial(level=0, published=True)
    return render_template('tutorial_form.html', tutorial=tutorial, page_title='Create new Tutorial')


@tutorial_bp.route('/tutorials/save', methods=['POST'])
def save_tutorial():
    """Create a tutorial, or overwrite one when the form carries an id."""
    logger = get_logger("route")
    with log_context(route="save_tutorial", tutorial_id=request.form.get('id') or None):
        try:
            tutorial = tutorial_schema.load(request.form, session=db.session)
            tutorial_utils.save_tutorial(tutorial)
        except ValidationError as e:
            db.session.rollback()
            logger.warning("Rejected tutorial form errors=%s", e.normalized_messages())
            return redirect(_list_url(message=format_validation_error(e)))
        except Exception as e:
            db.session.rollback()
            logger.exception("Error saving tutorial")
            return redirect(_list_url(message=str(e)))

    flash('The Tutorial has been saved successfully!', 'success')
    return redirect(_list_url())


@tutorial_bp.route('/tutorials/<int:tutorial_id>')
def edit_tutorial(tutorial_id):
    try:
        tutorial = tutorial_utils.get_tutorial_by_id(tutorial_id)
    except Exception as e:
        get_logger("route").exception("Error loading tutorial id=%s", tutorial_id)
        flash(str(e), 'danger')
        return redirect(_list_url())

    if tutorial is None:
        flash(f'Tutorial with id={tutorial_id} was not found', 'danger')
        return redirect(_list_url())

    return render_template(
        'tutorial_form.html',
        tutorial=tutorial,
        page_title=f'Edit Tutorial (ID: {tutorial_id})',
    )


@tutorial_bp.route('/tutorials/delete/<int:tutorial_id>')
def delete_tutorial(tutorial_id):
    try:
        tutorial_utils.delete_tutorial_by_id(tutorial_id)
        flash(f'The Tutorial with id={tutorial_id} has been deleted successfully!', 'success')
    except Exception as e:
        get_logger("route").exception("Error deleting tutorial id=%s", tutorial_id)
        flash(str(e), 'danger')
    return redirect(_list_url())


@tutorial_bp.route('/tutorials/<int:tutorial_id>/published/<status>')
def update_published_status(tutorial_id, status):
    published = _parse_status(status)
    try:
        tutorial_utils.update_published_status(tutorial_id, published)
    except Exception:
        get_logger("route").exception("Error updating status of tutorial id=%s", tutorial_id)
        flash(f'Could not update the status of Tutorial id={tutorial_id}', 'danger')
        return redirect(_list_url())

    state = 'published' if published else 'disabled'
    flash(f'The Tutorial id={tutorial_id} has been {state}', 'success')
    return redirect(_list_url())
