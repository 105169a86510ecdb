# Post management routes: admin CRUD plus the public single post view
from flask import abort, current_app, jsonify, request
from flask_login import current_user, login_required

from folio import get_render_cache, get_repository
from folio.audit import audit_log_create, audit_log_delete, audit_log_update
from folio.cache import BLOG_INDEX_PATH, blog_post_path
from folio.errors import error_response
from folio.models import DRAFT
from folio.posts import bp
from folio.posts.converter import html_to_markdown
from folio.forms import first_error
from folio.posts.forms import PostForm, StatusForm
from folio.utils import is_truthy_flag, json_formdata, json_object_body


def _validated(form_class):
    """
    Build and validate a form from the JSON body.

    Returns:
        tuple: (form, None) when valid, (None, error response) otherwise.
    """
    body = json_object_body()
    if body is None:
        return None, error_response(400, 'Invalid JSON body')
    form = form_class(formdata=json_formdata(body))
    if not form.validate():
        return None, error_response(400, first_error(form))
    return form, None


def _invalidate(*slugs):
    paths = [BLOG_INDEX_PATH] + [blog_post_path(slug) for slug in slugs if slug]
    get_render_cache().invalidate(paths)


@bp.route('', methods=['GET'])
@login_required
def list_posts():
    """
    Post metadata for the admin table, newest first
    """
    include_drafts = is_truthy_flag(request.args.get('includeDrafts'))
    metas = get_repository().list_meta(include_drafts=include_drafts)
    return jsonify([meta.to_dict() for meta in metas])


@bp.route('', methods=['POST'])
@login_required
def create_post():
    """
    Create a post from editor HTML; new posts are drafts unless told otherwise
    """
    form, error = _validated(PostForm)
    if error:
        return error

    title = str(form.title.data).strip()
    markdown = html_to_markdown(str(form.html.data))
    try:
        slug = get_repository().create(
            title,
            markdown,
            slug=form.slug.data or None,
            status=form.status.data or DRAFT,
        )
    except ValueError as e:
        return error_response(400, str(e))

    audit_log_create('Post', slug, f'Created post: {title}', {'status': form.status.data or DRAFT})
    _invalidate(slug)
    return jsonify({'ok': True, 'slug': slug}), 201


@bp.route('/<slug>', methods=['GET'])
def get_post(slug):
    """
    Rendered post. Drafts are only visible to the admin
    """
    post = get_repository().get_by_slug(slug)
    if post is None:
        abort(404)
    if not post.meta.is_published and not current_user.is_authenticated:
        abort(404)
    return jsonify(post.to_dict())


@bp.route('/<slug>/raw', methods=['GET'])
@login_required
def get_raw_post(slug):
    """
    Unrendered Markdown for loading a post back into the editor
    """
    raw = get_repository().get_raw(slug)
    if raw is None:
        abort(404)
    meta, markdown = raw
    return jsonify({'ok': True, 'meta': meta.to_dict(), 'markdown': markdown})


@bp.route('/<slug>', methods=['PUT'])
@login_required
def update_post(slug):
    """
    Replace title/content and optionally rename or change status
    """
    form, error = _validated(PostForm)
    if error:
        return error

    title = str(form.title.data).strip()
    markdown = html_to_markdown(str(form.html.data))
    try:
        new_slug = get_repository().update(
            slug,
            title,
            markdown,
            slug=form.slug.data or None,
            status=form.status.data or None,
        )
    except ValueError as e:
        return error_response(400, str(e))

    changes = {'status': form.status.data} if form.status.data else None
    if new_slug != slug:
        audit_log_update('Post', new_slug, f'Updated and renamed post from {slug}', changes)
    else:
        audit_log_update('Post', slug, f'Updated post: {title}', changes)
    _invalidate(slug, new_slug)
    return jsonify({'ok': True, 'slug': new_slug})


@bp.route('/<slug>', methods=['PATCH'])
@login_required
def set_post_status(slug):
    """
    Toggle between draft and published
    """
    form, error = _validated(StatusForm)
    if error:
        return error

    try:
        found = get_repository().set_status(slug, form.status.data)
    except ValueError as e:
        return error_response(400, str(e))
    if not found:
        abort(404)

    audit_log_update('Post', slug, f'Status set to {form.status.data}')
    _invalidate(slug)
    return jsonify({'ok': True})


@bp.route('/<slug>', methods=['DELETE'])
@login_required
def delete_post(slug):
    if not get_repository().delete(slug):
        abort(404)

    audit_log_delete('Post', slug, 'Deleted post')
    current_app.logger.info(f'Post {slug} deleted')
    _invalidate(slug)
    return jsonify({'ok': True})
